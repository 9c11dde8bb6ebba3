"""Command-line parsing: flags, paths and the default target."""
import pytest

import bls
from bls import InvalidArgument, ListingConfig, resolve_arguments


def test_flag_order_does_not_matter():
    assert resolve_arguments(["-r", "-x"]) == resolve_arguments(["-x", "-r"])


def test_long_and_short_flags_are_equivalent():
    assert resolve_arguments(["--recursive", "--hidden"]) == resolve_arguments(["-r", "-x"])


def test_flags_may_be_mixed_with_paths():
    config, targets = resolve_arguments(["one", "-r", "two", "-x", "three"])
    assert config.recursive
    assert config.show_hidden
    assert targets == ["one", "two", "three"]


def test_no_paths_defaults_to_current_directory():
    config, targets = resolve_arguments([])
    assert targets == ["."]
    assert config == ListingConfig(recursive=False, show_hidden=False, color="always", header=True)


def test_color_and_header_options():
    config, _ = resolve_arguments(["--color", "never", "--no-header", "x"])
    assert config.color == "never"
    assert config.header is False


def test_unknown_flag_is_invalid_argument():
    with pytest.raises(InvalidArgument) as excinfo:
        resolve_arguments(["-q", "somewhere"])
    assert "-q" in str(excinfo.value)


def test_bad_color_choice_is_invalid_argument():
    with pytest.raises(InvalidArgument):
        resolve_arguments(["--color", "sometimes"])


def test_main_reports_invalid_argument_without_listing(plain_console, err_console):
    status = bls.main(["--bogus", "."], console=plain_console, err_console=err_console)
    assert status == 2
    assert plain_console.file.getvalue() == ""
    err = err_console.file.getvalue()
    assert "ERROR" in err
    assert "--bogus" in err


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        resolve_arguments(["--version"])
    assert excinfo.value.code == 0
    assert f"bls {bls.__version__}" in capsys.readouterr().out
