from sciimg.api.batch import look_vectors, pixel_grid, project_points
from sciimg.api.model_io import deserialize, load_camera_model, model_from_dict, model_to_dict, save_camera_model

__all__ = [
    "deserialize",
    "load_camera_model",
    "look_vectors",
    "model_from_dict",
    "model_to_dict",
    "pixel_grid",
    "project_points",
    "save_camera_model",
]
