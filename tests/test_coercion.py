import pytest

from services.pacing.errors import FormatError
from services.pacing.models import Checkpoint, RestPeriods
from utils.coercion import (
    format_checkpoint_lines,
    parse_checkpoint,
    parse_checkpoint_lines,
    parse_rest,
)


def test_parse_checkpoint():
    assert parse_checkpoint(" 42.5 , 10 ") == Checkpoint(42.5, 10.0)
    for bad in ["42.5", "a,b", "1,2,3", ",5", "inf,1"]:
        with pytest.raises(FormatError):
            parse_checkpoint(bad)


def test_parse_checkpoint_lines_round_trip():
    text = "10,5\n\n  25.5  \n40,0"
    cps = parse_checkpoint_lines(text)
    assert cps == [Checkpoint(10.0, 5.0), Checkpoint(25.5, 0.0), Checkpoint(40.0, 0.0)]
    assert parse_checkpoint_lines(format_checkpoint_lines(cps)) == cps


def test_parse_checkpoint_lines_rejects_garbage():
    with pytest.raises(FormatError):
        parse_checkpoint_lines("ravito")


def test_parse_rest():
    assert parse_rest("2,15") == RestPeriods(2, 15.0)
    with pytest.raises(FormatError):
        parse_rest("1.5,10")
