from __future__ import annotations

import dataclasses

import pytest

from core.process_mode import ProcessMode


def test_no_flags_defaults():
    mode = ProcessMode.parse([])
    assert mode == ProcessMode()
    assert mode.args == ()


@pytest.mark.parametrize("arg,attr", [
    ("--multi", "multi_instance"), ("-m", "multi_instance"),
    ("--silent", "silent"), ("-s", "silent"),
    ("--sandbox", "sandbox"),
    ("--portable", "portable"), ("-p", "portable"),
])
def test_short_and_long_flags(arg, attr):
    assert getattr(ProcessMode.parse([arg]), attr) is True


def test_flags_are_case_insensitive():
    mode = ProcessMode.parse(["--MULTI", "-S", "--Portable"])
    assert mode.multi_instance and mode.silent and mode.portable


def test_unrecognised_arguments_pass_through_in_order():
    mode = ProcessMode.parse(["foo.png", "--silent", "--upload", "bar.txt"])
    assert mode.silent
    assert mode.args == ("foo.png", "--upload", "bar.txt")


def test_sandbox_wins_over_portable():
    mode = ProcessMode.parse(["--sandbox", "--portable"])
    assert mode.sandbox
    assert not mode.portable


def test_mode_is_immutable():
    mode = ProcessMode.parse(["-m"])
    with pytest.raises(dataclasses.FrozenInstanceError):
        mode.portable = True  # type: ignore[misc]
    upgraded = mode.as_portable()
    assert upgraded.portable and upgraded.multi_instance
    assert not mode.portable
