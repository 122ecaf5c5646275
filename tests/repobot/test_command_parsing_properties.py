"""Property-based tests for slash-command parsing and the dispatch table."""

import pytest
from hypothesis import given, settings, strategies as st

from src.repobot.commands.models import (
    COMMANDS,
    Command,
    CommandAction,
    lookup_command,
    parse_command,
)


token = st.text(
    alphabet=st.characters(blacklist_categories=("Cs", "Z", "Cc")),
    min_size=1,
    max_size=15,
)
separator = st.sampled_from([" ", "  ", "\t", "\n", " \n "])


@st.composite
def command_comment(draw: st.DrawFn):
    """Generate (comment body, command name, arg tokens)."""
    name = "/" + draw(token)
    args = draw(st.lists(token, max_size=6))
    parts = [name]
    for arg in args:
        parts.append(draw(separator))
        parts.append(arg)
    leading = draw(st.sampled_from(["", " ", "\n"]))
    trailing = draw(st.sampled_from(["", " ", "\n"]))
    return leading + "".join(parts) + trailing, name, args


class TestParseCommand:
    @given(command_comment())
    @settings(max_examples=200)
    def test_name_and_args(self, generated):
        body, name, args = generated

        command = parse_command(body)

        assert command is not None
        assert command.name == name
        assert command.args == " ".join(args)

    @given(st.text(max_size=100).filter(lambda b: not b.strip().startswith("/")))
    @settings(max_examples=100)
    def test_non_commands(self, body):
        assert parse_command(body) is None

    @given(version=token, rest=st.lists(token, max_size=4))
    @settings(max_examples=100)
    def test_split_first_arg(self, version, rest):
        command = parse_command(" ".join(["/test-version-skew", version, *rest]))

        assert command.split_first_arg() == (version, " ".join(rest))

    def test_empty_body(self):
        assert parse_command("") is None
        assert parse_command(None) is None

    def test_bare_slash_is_a_command(self):
        command = parse_command("/ ok-to-test")

        assert command.name == "/"
        assert lookup_command(command) is None

    def test_split_first_arg_without_args(self):
        assert Command(name="/test-version-skew").split_first_arg() == (None, "")


class TestDispatchTable:
    def test_open_commands(self):
        open_commands = {name for name, spec in COMMANDS.items() if not spec.privileged}

        assert open_commands == {"/assign", "/retest-failed"}

    @pytest.mark.parametrize(
        "name, event_type",
        [
            ("/ok-to-test", "e2e-test"),
            ("/ok-to-perf", "perf-test"),
            ("/ok-to-perf-components", "components-perf-test"),
            ("/test-sdk-all", "test-sdk-all"),
            ("/test-sdk-java", "test-sdk-java"),
            ("/test-sdk-python", "test-sdk-python"),
            ("/test-sdk-js", "test-sdk-js"),
            ("/test-sdk-go", "test-sdk-go"),
            ("/test-version-skew", "test-version-skew"),
        ],
    )
    def test_dispatch_event_types(self, name, event_type):
        spec = COMMANDS[name]

        assert spec.action == CommandAction.DISPATCH
        assert spec.requires_pull_request
        assert spec.event_type == event_type
        assert spec.payload_command == name[1:]

    def test_only_ok_to_test_drops_args(self):
        without_args = {
            name
            for name, spec in COMMANDS.items()
            if spec.action == CommandAction.DISPATCH and not spec.includes_args
        }

        assert without_args == {"/ok-to-test"}
