"""Tests for commandgate/commands/parsers.py"""

from unittest.mock import AsyncMock

import hikari
import pytest

from commandgate.commands.argument_types import argument, many, optional, remainder
from commandgate.commands.converters import IntegerConverter, UserConverter
from commandgate.commands.parsers import ArgumentParser, ParsedArguments
from commandgate.commands.spec import CommandSpec
from commandgate.errors import InvalidArgument, MissingArgument, ParseFailure


@pytest.fixture
def parser():
    return ArgumentParser()


class TestPositionalParsing:
    """Test ArgumentParser.parse with text tokens."""

    @pytest.mark.asyncio
    async def test_single_integer(self, parser, resolution_context):
        spec = CommandSpec("roll", args=(argument("sides", int),))

        result = await parser.parse(["20"], spec, resolution_context)

        assert result["sides"] == 20
        assert result.is_supplied("sides")

    @pytest.mark.asyncio
    async def test_arguments_consume_tokens_in_order(self, parser, resolution_context, mock_user):
        spec = CommandSpec(
            "give",
            args=(argument("member", UserConverter()), argument("amount", int), optional("note")),
        )

        result = await parser.parse(["<@111111111>", "5", "thanks"], spec, resolution_context)

        assert dict(result) == {"member": mock_user, "amount": 5, "note": "thanks"}

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, parser, resolution_context):
        spec = CommandSpec("roll", args=(argument("sides", int), argument("count", int)))

        with pytest.raises(MissingArgument) as exc_info:
            await parser.parse(["6"], spec, resolution_context)

        assert exc_info.value.name == "count"
        assert "count" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_argument_keeps_cause(self, parser, resolution_context):
        spec = CommandSpec("roll", args=(argument("sides", int),))

        with pytest.raises(InvalidArgument) as exc_info:
            await parser.parse(["six"], spec, resolution_context)

        error = exc_info.value
        assert error.name == "sides"
        assert error.raw == "six"
        assert isinstance(error.cause, ValueError)
        assert isinstance(error, ParseFailure)

    @pytest.mark.asyncio
    async def test_first_failure_wins(self, parser, resolution_context):
        spec = CommandSpec("pair", args=(argument("a", int), argument("b", int)))

        with pytest.raises(InvalidArgument) as exc_info:
            await parser.parse(["x", "y"], spec, resolution_context)

        assert exc_info.value.name == "a"

    @pytest.mark.asyncio
    async def test_optional_absent(self, parser, resolution_context):
        spec = CommandSpec("help", args=(optional("topic"), optional("page", int, default=1)))

        result = await parser.parse([], spec, resolution_context)

        assert result["topic"] is hikari.UNDEFINED
        assert result["page"] == 1
        assert not result.is_supplied("topic")
        assert not result.is_supplied("page")

    @pytest.mark.asyncio
    async def test_extra_tokens_are_ignored(self, parser, resolution_context):
        spec = CommandSpec("roll", args=(argument("sides", int),))

        result = await parser.parse(["6", "extra", "tokens"], spec, resolution_context)

        assert dict(result) == {"sides": 6}

    @pytest.mark.asyncio
    async def test_no_arguments(self, parser, resolution_context):
        result = await parser.parse(["ignored"], CommandSpec("ping"), resolution_context)
        assert len(result) == 0


class TestVariadicParsing:
    @pytest.mark.asyncio
    async def test_list_converts_each_token(self, parser, resolution_context):
        spec = CommandSpec("sum", args=(many("numbers", int),))

        result = await parser.parse(["1", "2", "3"], spec, resolution_context)

        assert result["numbers"] == (1, 2, 3)

    @pytest.mark.asyncio
    async def test_trailing_list_may_be_empty(self, parser, resolution_context):
        spec = CommandSpec("sum", args=(argument("first", int), many("rest", int)))

        result = await parser.parse(["1"], spec, resolution_context)

        assert result["first"] == 1
        assert result["rest"] == ()
        assert not result.is_supplied("rest")

    @pytest.mark.asyncio
    async def test_required_list_needs_a_token(self, parser, resolution_context):
        spec = CommandSpec("sum", args=(many("numbers", int, required=True),))

        with pytest.raises(MissingArgument):
            await parser.parse([], spec, resolution_context)

    @pytest.mark.asyncio
    async def test_list_reports_bad_element(self, parser, resolution_context):
        spec = CommandSpec("sum", args=(many("numbers", int),))

        with pytest.raises(InvalidArgument) as exc_info:
            await parser.parse(["1", "two", "3"], spec, resolution_context)

        assert exc_info.value.raw == "two"

    @pytest.mark.asyncio
    async def test_remainder_joins_with_single_spaces(self, parser, resolution_context):
        spec = CommandSpec("say", args=(argument("times", int), remainder("text")))

        result = await parser.parse(["2", "hello", "there", "world"], spec, resolution_context)

        assert result["times"] == 2
        assert result["text"] == "hello there world"

    @pytest.mark.asyncio
    async def test_remainder_is_required_by_default(self, parser, resolution_context):
        spec = CommandSpec("say", args=(remainder("text"),))

        with pytest.raises(MissingArgument):
            await parser.parse([], spec, resolution_context)


class TestChoices:
    @pytest.mark.asyncio
    async def test_choice_accepted(self, parser, resolution_context):
        spec = CommandSpec("mode", args=(argument("level", choices={"low", "high"}),))

        result = await parser.parse(["high"], spec, resolution_context)

        assert result["level"] == "high"

    @pytest.mark.asyncio
    async def test_choices_checked_before_converter(self, parser, resolution_context):
        converter = AsyncMock(spec=IntegerConverter)
        converter.convert = AsyncMock(return_value=1)
        spec = CommandSpec("mode", args=(argument("level", converter, choices={"1", "2"}),))

        with pytest.raises(InvalidArgument) as exc_info:
            await parser.parse(["3"], spec, resolution_context)

        assert isinstance(exc_info.value.cause, ValueError)
        converter.convert.assert_not_called()


class TestOptionParsing:
    """Test ArgumentParser.parse_options for structured invocations."""

    @pytest.mark.asyncio
    async def test_string_options_are_converted(self, parser, resolution_context):
        spec = CommandSpec("roll", args=(argument("sides", int), optional("label")))

        result = await parser.parse_options({"sides": "12"}, spec, resolution_context)

        assert result["sides"] == 12
        assert result["label"] is hikari.UNDEFINED

    @pytest.mark.asyncio
    async def test_typed_options_pass_through(self, parser, resolution_context, mock_user):
        spec = CommandSpec("give", args=(argument("member", UserConverter()), argument("amount", int)))

        result = await parser.parse_options({"member": mock_user, "amount": 3}, spec, resolution_context)

        assert result["member"] is mock_user
        assert result["amount"] == 3

    @pytest.mark.asyncio
    async def test_none_counts_as_absent(self, parser, resolution_context):
        spec = CommandSpec("roll", args=(argument("sides", int),))

        with pytest.raises(MissingArgument):
            await parser.parse_options({"sides": None}, spec, resolution_context)

    @pytest.mark.asyncio
    async def test_list_option_from_string(self, parser, resolution_context):
        spec = CommandSpec("sum", args=(many("numbers", int),))

        result = await parser.parse_options({"numbers": "4 5 6"}, spec, resolution_context)

        assert result["numbers"] == (4, 5, 6)

    @pytest.mark.asyncio
    async def test_list_option_from_sequence(self, parser, resolution_context):
        spec = CommandSpec("sum", args=(many("numbers", int),))

        result = await parser.parse_options({"numbers": ["4", 5]}, spec, resolution_context)

        assert result["numbers"] == (4, 5)

    @pytest.mark.asyncio
    async def test_invalid_option(self, parser, resolution_context):
        spec = CommandSpec("roll", args=(argument("sides", int),))

        with pytest.raises(InvalidArgument):
            await parser.parse_options({"sides": "many"}, spec, resolution_context)

    @pytest.mark.asyncio
    async def test_typed_option_outside_choices(self, parser, resolution_context):
        spec = CommandSpec("roll", args=(argument("sides", int, choices={"6", "20"}),))

        accepted = await parser.parse_options({"sides": 20}, spec, resolution_context)
        with pytest.raises(InvalidArgument) as exc_info:
            await parser.parse_options({"sides": 7}, spec, resolution_context)

        assert accepted["sides"] == 20
        assert exc_info.value.raw == "7"
        assert isinstance(exc_info.value.cause, ValueError)

    @pytest.mark.asyncio
    async def test_typed_list_items_checked_against_choices(self, parser, resolution_context):
        spec = CommandSpec("pick", args=(many("numbers", int, choices={"1", "2"}),))

        with pytest.raises(InvalidArgument):
            await parser.parse_options({"numbers": [1, 3]}, spec, resolution_context)

    @pytest.mark.asyncio
    async def test_remainder_option_from_sequence(self, parser, resolution_context):
        spec = CommandSpec("say", args=(remainder("text"),))

        result = await parser.parse_options({"text": ["hello", "world"]}, spec, resolution_context)

        assert result["text"] == "hello world"


class TestParsedArguments:
    def test_is_read_only(self):
        parsed = ParsedArguments({"a": 1}, frozenset({"a"}))

        with pytest.raises(TypeError):
            parsed["a"] = 2
        with pytest.raises(AttributeError):
            parsed.extra = True

    def test_copy_of_input(self):
        values = {"a": 1}
        parsed = ParsedArguments(values)
        values["a"] = 2

        assert parsed["a"] == 1
        assert not parsed.is_supplied("a")
