from .exceptions import (
    TransformException, LookupException, ExtrapolationException, ConnectivityException
)
from .tf2_buffer import StandaloneTF2Buffer, TransformHistory
from .tf2_listener import StandaloneTransformListener
from .tf_transformations import (
    euler_from_quaternion, quaternion_from_euler, quaternion_multiply, quaternion_matrix,
    normalize_quaternion
)
from .utils import do_transform_pose
