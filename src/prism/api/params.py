"""Argument-shape validators for incoming requests.

Requests carry their arguments either positionally (a list) or by name (a
mapping). Both helpers raise `ValidationError` (805) on bad shapes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from prism.core.errors import ValidationError

logger = logging.getLogger(__name__)


def extract_single_argument(args: Any, field_name: Any) -> str:
    """Return the only argument: `args[0]` for a list, `args[field_name]` for a mapping."""
    if not isinstance(field_name, str):
        logger.warning("extract_single_argument: invalid argument %r", field_name)
        raise ValidationError()

    result = None
    if args:
        if isinstance(args, list):
            result = args[0]
        elif isinstance(args, Mapping):
            result = args.get(field_name)

    if not result or not isinstance(result, str):
        logger.warning("Wrong arguments")
        raise ValidationError()
    return result


def extract_argument_list(args: Any, fields: Any) -> dict[str, Any]:
    """Map positional or named `args` onto `fields`."""
    if not isinstance(fields, list):
        logger.warning("extract_argument_list: invalid argument")
        raise ValidationError()
    for f in fields:
        if not isinstance(f, str):
            logger.warning("extract_argument_list: invalid argument %r", f)
            raise ValidationError()

    if args is None:
        return {}

    if isinstance(args, list):
        if len(args) != len(fields):
            logger.warning("extract_argument_list: invalid argument: len(args) != len(fields)")
            raise ValidationError()
        return dict(zip(fields, args))

    if isinstance(args, Mapping):
        return {f: args.get(f) for f in fields}

    logger.warning("extract_argument_list: args must be a list or a mapping")
    raise ValidationError()
