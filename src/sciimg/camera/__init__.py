"""
CAHV-family camera models.

Forward projection (object space -> pixel) is `xyz_to_ls`, inverse
projection (pixel -> ray) is `ls_to_look_vector`.
"""

from sciimg.camera.base import CameraModelProtocol, ImageCoordinate, LookVector, ModelType, PupilType
from sciimg.camera.cahv import Cahv
from sciimg.camera.cahvor import Cahvor
from sciimg.camera.cahvore import LINEARITY_FISHEYE, LINEARITY_PERSPECTIVE, Cahvore
from sciimg.camera.linearize import linearize
from sciimg.camera.model import AnyCameraModel, CameraModel

__all__ = [
    "AnyCameraModel",
    "Cahv",
    "Cahvor",
    "Cahvore",
    "CameraModel",
    "CameraModelProtocol",
    "ImageCoordinate",
    "LINEARITY_FISHEYE",
    "LINEARITY_PERSPECTIVE",
    "LookVector",
    "ModelType",
    "PupilType",
    "linearize",
]
