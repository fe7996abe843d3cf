"""Tests for the ask CLI."""

import pytest
from ask.cli import ask, commands, main
from ask.config import Config, set_config
from ask.history import load_history, save_history
from ask.llm.models import FeatureFlags, RemoteModel
from click.testing import CliRunner


def test_main_reorders_and_forwards(capsys, mocker):
    """Unknown flags go to claude, prompt words may start with a dash."""
    mocker.patch("ask.cli.is_piped", return_value=False)

    with pytest.raises(SystemExit) as exc_info:
        main(["-m", "opus", "--dry-run", "fix", "the", "-1", "bug", "-x", "val"])

    assert exc_info.value.code == 0
    out = capsys.readouterr().out.strip()
    assert out == "claude -p 'fix the -1 bug' --model opus -x val"


def test_main_routes_subcommands(mocker):
    ask_main = mocker.patch.object(ask, "main")
    commands_main = mocker.patch.object(commands, "main")

    main(["models", "--remote"])
    commands_main.assert_called_once_with(args=["models", "--remote"], prog_name="ask")
    ask_main.assert_not_called()

    main(["hello", "--raw", "-x", "1"])
    ask_main.assert_called_once_with(
        args=["--raw", "--", "hello"], prog_name="ask", obj={"passthrough": ["-x", "1"]}
    )


def test_main_flags_only(mocker):
    ask_main = mocker.patch.object(ask, "main")

    main(["-m", "opus", "--dry-run"])

    ask_main.assert_called_once_with(
        args=["-m", "opus", "--dry-run"], prog_name="ask", obj={"passthrough": []}
    )


def test_main_missing_model_value(capsys, mocker):
    """-m at the end is a usage error, nothing is sent."""
    set_config(Config(mode="api", provider="ollama"))
    run_query = mocker.patch("ask.cli.run_query")

    with pytest.raises(SystemExit) as exc_info:
        main(["what", "is", "this", "-m"])

    assert exc_info.value.code == 2
    assert "requires an argument" in capsys.readouterr().err
    run_query.assert_not_called()


def test_version():
    runner = CliRunner()
    result = runner.invoke(ask, ["--version"])

    assert result.exit_code == 0
    assert result.output.startswith("ask version ")


def test_dry_run_cli_mode():
    runner = CliRunner()
    result = runner.invoke(
        ask, ["--dry-run", "--", "hello"], obj={"passthrough": ["--verbose"]}
    )

    assert result.exit_code == 0
    assert result.output.strip() == "claude -p hello --verbose"
    assert [e.prompt for e in load_history()] == ["hello"]


def test_dry_run_api_mode():
    set_config(Config(mode="api", provider="ollama", thinking=True))

    runner = CliRunner()
    result = runner.invoke(ask, ["--dry-run", "--search", "--", "hello", "world"])

    assert result.exit_code == 0
    assert result.output.strip() == (
        "[ollama] model=llama3 thinking=True search=True prompt='hello world'"
    )


def test_flags_override_config(mocker):
    set_config(
        Config(mode="api", provider="gemini", default_model="pro", thinking=True)
    )
    run_api = mocker.patch("ask.cli.run_api")

    runner = CliRunner()
    result = runner.invoke(ask, ["--think=false", "-m", "flash", "--raw", "--", "hi"])

    assert result.exit_code == 0
    args, kwargs = run_api.call_args
    assert args[:4] == (
        "hi",
        "flash",
        Config(mode="api", provider="gemini", default_model="pro", thinking=True),
        FeatureFlags(thinking=False, web_search=False),
    )
    assert "emit" in kwargs


def test_config_defaults_used(mocker):
    set_config(Config(mode="api", provider="gemini", default_model="pro", web_search=True))
    run_api = mocker.patch("ask.cli.run_api")

    runner = CliRunner()
    result = runner.invoke(ask, ["--raw", "--", "hi"])

    assert result.exit_code == 0
    args, _ = run_api.call_args
    assert args[1] == "pro"
    assert args[3] == FeatureFlags(thinking=False, web_search=True)


def test_piped_input(mocker):
    set_config(Config(mode="api", provider="ollama"))
    run_api = mocker.patch("ask.cli.run_api")

    runner = CliRunner()
    result = runner.invoke(ask, ["--raw", "--", "explain"], input="Traceback ...\n")

    assert result.exit_code == 0
    assert run_api.call_args.args[0] == "explain\n\n```stdin\nTraceback ...\n```"


def test_streams_reply(mocker):
    set_config(Config(mode="api", provider="ollama"))

    def fake_run_api(prompt, model, config, features, emit=None, **kwargs):
        emit("Hel")
        emit("lo")

    mocker.patch("ask.cli.run_api", side_effect=fake_run_api)

    runner = CliRunner()
    result = runner.invoke(ask, ["--raw", "--", "hi"])

    assert result.exit_code == 0
    assert result.output == "Hello\n"


def test_missing_credential():
    set_config(Config(mode="api", provider="openai"))

    runner = CliRunner()
    result = runner.invoke(ask, ["--", "hi"])

    assert result.exit_code == 1


def test_unknown_provider():
    set_config(Config(mode="api", provider="nope"))

    runner = CliRunner()
    result = runner.invoke(ask, ["--dry-run", "--", "hi"])

    assert result.exit_code == 1


def test_canceled(mocker):
    from ask.errors import CancellationError

    set_config(Config(mode="api", provider="ollama"))
    mocker.patch("ask.cli.run_api", side_effect=CancellationError("ollama"))

    runner = CliRunner()
    result = runner.invoke(ask, ["--raw", "--", "hi"])

    assert result.exit_code == 130


def test_no_prompt_shows_help():
    runner = CliRunner()
    result = runner.invoke(ask, [], input="")

    assert result.exit_code == 0
    assert "Usage: ask" in result.output


def test_models():
    runner = CliRunner()
    result = runner.invoke(commands, ["models"])

    assert result.exit_code == 0
    assert "Provider: anthropic" in result.output
    assert "claude-sonnet-4-5-20250929 (default)" in result.output
    assert "haiku" in result.output


def test_models_remote(mocker):
    set_config(Config(mode="api", provider="openai", api_key="sk-test"))
    mocker.patch(
        "ask.cli.list_remote_models",
        return_value=[
            RemoteModel(id="gpt-4o"),
            RemoteModel(id="gpt-5", name="GPT-5"),
            RemoteModel(id="chatgpt-4o-latest"),
        ],
    )

    runner = CliRunner()
    result = runner.invoke(commands, ["models", "--remote"])

    assert result.exit_code == 0
    assert "Provider: openai" in result.output
    assert "Additional models:" in result.output
    extra = result.output.split("Additional models:")[1]
    assert "gpt-4o\n" not in extra
    assert extra.index("chatgpt-4o-latest") < extra.index("gpt-5 (GPT-5)")


def test_models_remote_requires_key():
    set_config(Config(mode="api", provider="xai"))

    runner = CliRunner()
    result = runner.invoke(commands, ["models", "--remote"])

    assert result.exit_code == 1


def test_history_empty():
    runner = CliRunner()
    result = runner.invoke(commands, ["history"])

    assert result.exit_code == 0
    assert "No history yet" in result.output


def test_history_rerun(mocker):
    save_history("old question")
    save_history("newer question")
    pick = mocker.patch("ask.cli.pick", return_value=("", 1))
    run_query = mocker.patch("ask.cli.run_query")

    runner = CliRunner()
    result = runner.invoke(commands, ["h"])

    assert result.exit_code == 0
    options = pick.call_args.args[0]
    assert options[0].startswith("newer question")
    assert run_query.call_args.args[0] == "old question"
    assert load_history()[0].prompt == "old question"


def test_history_clear():
    save_history("something")

    runner = CliRunner()
    result = runner.invoke(commands, ["history", "clear"])

    assert result.exit_code == 0
    assert load_history() == []


def test_help_command():
    runner = CliRunner()

    result = runner.invoke(commands, ["help"])
    assert result.exit_code == 0
    assert "single-shot LLM queries" in result.output

    result = runner.invoke(commands, ["help", "models"])
    assert result.exit_code == 0
    assert "--remote" in result.output
