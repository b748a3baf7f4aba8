"""k1s0 mdc library."""

from . import mdc
from .compiler import compile_wrapper, scan_tags
from .config import MdcSettings, load_settings
from .exceptions import MdcError, MdcErrorCodes, MdcSetupError
from .generator import generate_tracking_id
from .logger import merge_mdc, new_logger, new_logger_from_settings
from .registry import RegistryBuilder, WrapperRegistry
from .tags import LogAs, TrackingId
from .wrapper import CompiledWrapper

__all__ = [
    "mdc",
    "LogAs",
    "TrackingId",
    "RegistryBuilder",
    "WrapperRegistry",
    "CompiledWrapper",
    "compile_wrapper",
    "scan_tags",
    "generate_tracking_id",
    "MdcSettings",
    "load_settings",
    "new_logger",
    "new_logger_from_settings",
    "merge_mdc",
    "MdcError",
    "MdcErrorCodes",
    "MdcSetupError",
]
