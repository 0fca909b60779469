"""Request boundary: argument validators and the service facade."""

from prism.api.params import extract_argument_list, extract_single_argument
from prism.api.service import PrismService

__all__ = [
    "PrismService",
    "extract_argument_list",
    "extract_single_argument",
]
