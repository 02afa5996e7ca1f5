from sciimg.api import deserialize, load_camera_model, look_vectors, project_points, save_camera_model
from sciimg.camera import (
    Cahv,
    Cahvor,
    Cahvore,
    CameraModel,
    ImageCoordinate,
    LookVector,
    ModelType,
    PupilType,
    linearize,
)
from sciimg.config import DEFAULT_SOLVER_CONFIG, SolverConfig
from sciimg.core.matrix import Matrix
from sciimg.core.quaternion import Quaternion
from sciimg.core.vector import Axis, Vector
from sciimg.exceptions import (
    CameraModelError,
    ConfigurationError,
    ConvergenceError,
    DomainError,
    NumericalDegeneracyError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "Axis",
    "Cahv",
    "Cahvor",
    "Cahvore",
    "CameraModel",
    "CameraModelError",
    "ConfigurationError",
    "ConvergenceError",
    "DEFAULT_SOLVER_CONFIG",
    "DomainError",
    "ImageCoordinate",
    "LookVector",
    "Matrix",
    "ModelType",
    "NumericalDegeneracyError",
    "PupilType",
    "Quaternion",
    "SolverConfig",
    "ValidationError",
    "Vector",
    "deserialize",
    "linearize",
    "load_camera_model",
    "look_vectors",
    "project_points",
    "save_camera_model",
]
