"""Input/output: configuration files, image access and result files."""

from flimfit.io.config import generate_default_config, load_config, save_config
from flimfit.io.data_access import ArrayDataAccess, ResultMaps, read_image
from flimfit.io.output import save_results

__all__ = [
    "ArrayDataAccess",
    "ResultMaps",
    "generate_default_config",
    "load_config",
    "read_image",
    "save_config",
    "save_results",
]
