# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import pytest

from sgres_lib.core.config import CFG
from sgres_lib.core.error import (
    ParseError,
    SgresError,
    SourceUnavailable,
    UnknownStyle,
    UsageError,
)


@pytest.mark.parametrize(
    "error, code",
    [
        (SgresError, CFG.exit_codes.default),
        (UsageError, 1),
        (SourceUnavailable, 2),
        (ParseError, 3),
        (UnknownStyle, 3),
    ],
)
def test_exit_codes(error, code):
    assert error("message").exit_code == code


@pytest.mark.parametrize("error", [UsageError, SourceUnavailable, ParseError, UnknownStyle])
def test_errors_derive_from_sgres_error(error):
    with pytest.raises(SgresError, match="broken"):
        raise error("broken")
