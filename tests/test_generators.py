"""Tests for the shell completion script generators.

Generated scripts are validated with real shells when available.
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from shelltab.completions.generators import GENERATORS, generate_bash, generate_fish, generate_powershell, generate_zsh
from shelltab.completions.generators.common import (
    double_quote_escape,
    fish_quote,
    powershell_double_quote_escape,
    powershell_quote,
    sanitize_identifier,
)
from shelltab.constants import SCRIPT_DEBUG_ENV_VAR

EXEC = "/usr/bin/node /path/my-cli"


@pytest.fixture(scope="module")
def bash_script() -> str:
    """Generate bash completion script."""
    return generate_bash("my-cli", EXEC)


@pytest.fixture(scope="module")
def zsh_script() -> str:
    """Generate zsh completion script."""
    return generate_zsh("my-cli", EXEC)


@pytest.fixture(scope="module")
def fish_script() -> str:
    """Generate fish completion script."""
    return generate_fish("my-cli", EXEC)


@pytest.fixture(scope="module")
def powershell_script() -> str:
    """Generate PowerShell completion script."""
    return generate_powershell("my-cli", EXEC)


class TestHelpers:
    """Tests for the quoting helpers."""

    def test_sanitize_identifier(self):
        """Anything outside [A-Za-z0-9_] becomes an underscore."""
        assert sanitize_identifier("my-cli") == "my_cli"
        assert sanitize_identifier("test:cli.app") == "test_cli_app"
        assert sanitize_identifier("") == "_"
        assert sanitize_identifier("ok_1") == "ok_1"

    def test_double_quote_escape(self):
        """Characters special inside POSIX double quotes are escaped."""
        assert double_quote_escape('a "b" $c `d` \\') == 'a \\"b\\" \\$c \\`d\\` \\\\'

    def test_fish_quote(self):
        """Fish single quotes only escape quotes and backslashes."""
        assert fish_quote("it's") == "'it\\'s'"

    def test_powershell_quotes(self):
        """PowerShell doubles single quotes and backtick-escapes expandable characters."""
        assert powershell_quote("it's") == "'it''s'"
        assert powershell_double_quote_escape('$a "b"') == '`$a `"b`"'


class TestRegistry:
    """Tests for the GENERATORS registry."""

    def test_every_shell(self):
        """Every supported shell has a generator."""
        assert set(GENERATORS) == {"bash", "zsh", "fish", "powershell"}

    @pytest.mark.parametrize(
        ("shell", "reference"),
        [
            ("bash", "${BASH_COMP_DEBUG_FILE-}"),
            ("zsh", '"$BASH_COMP_DEBUG_FILE"'),
            ("fish", '"$BASH_COMP_DEBUG_FILE"'),
            ("powershell", "$env:BASH_COMP_DEBUG_FILE"),
        ],
    )
    def test_debug_file_variable(self, shell, reference):
        """The debug variable is read with each shell's syntax."""
        assert SCRIPT_DEBUG_ENV_VAR == "BASH_COMP_DEBUG_FILE"
        assert reference in GENERATORS[shell]("my-cli", EXEC)

    @pytest.mark.parametrize("shell", sorted(GENERATORS))
    def test_header_and_debug_file(self, shell):
        """Every script names its shell and honors the debug file variable."""
        script = GENERATORS[shell]("my-cli", EXEC)
        assert f"# {shell} completion for my-cli" in script
        assert "BASH_COMP_DEBUG_FILE" in script
        assert "__my_cli_debug" in script

    @pytest.mark.parametrize("shell", sorted(GENERATORS))
    @pytest.mark.parametrize("name", ["", "weird name", "a'b", 'x"$(rm -rf /)', "multi\nline", "ünïcode"])
    def test_never_fails(self, shell, name):
        """Any program name gives a script."""
        script = GENERATORS[shell](name, EXEC)
        ident = sanitize_identifier(name)
        assert f"__{ident}_debug" in script

    @pytest.mark.parametrize("shell", sorted(GENERATORS))
    def test_directive_values(self, shell):
        """Each script knows every directive bit under its wire value."""
        script = GENERATORS[shell]("my-cli", EXEC)
        for name, value in (("Error", 1), ("NoSpace", 2), ("NoFileComp", 4), ("FilterFileExt", 8), ("FilterDirs", 16), ("KeepOrder", 32)):
            assert f"ShellCompDirective{name}" in script or f"shellCompDirective{name}" in script
            assert str(value) in script


class TestBash:
    """Bash script content."""

    def test_registration(self, bash_script: str) -> None:
        """The literal program name is registered with the sanitized function."""
        assert "complete -o default -F __my_cli_complete my-cli" in bash_script

    def test_request(self, bash_script: str) -> None:
        """Each word is quoted and appended to the request."""
        assert 'requestComp="/usr/bin/node /path/my-cli complete --"' in bash_script
        assert "printf '%q'" in bash_script

    def test_directives(self, bash_script: str) -> None:
        """Directive bits map to compopt and compgen."""
        assert "local shellCompDirectiveError=1" in bash_script
        assert "compopt -o nospace" in bash_script
        assert "compopt -o nosort" in bash_script
        assert "compopt +o default" in bash_script
        assert "compgen -f -X" in bash_script
        assert "compgen -d" in bash_script

    def test_quoted_registration(self) -> None:
        """Names needing quotes are quoted where the shell reads them."""
        script = generate_bash("my cli", EXEC)
        assert "-F __my_cli_complete 'my cli'" in script

    def test_exec_is_escaped(self) -> None:
        """The invocation cannot break out of its double quotes."""
        script = generate_bash("x", 'run "$HOME"/x')
        assert 'requestComp="run \\"\\$HOME\\"/x complete --"' in script


class TestZsh:
    """Zsh script content."""

    def test_compdef(self, zsh_script: str) -> None:
        """The script works from $fpath and when sourced."""
        assert zsh_script.startswith("#compdef my-cli\n")
        assert "compdef _my_cli my-cli" in zsh_script
        assert "_my_cli()" in zsh_script

    def test_request(self, zsh_script: str) -> None:
        """Words are unquoted then quoted again."""
        assert 'requestComp="/usr/bin/node /path/my-cli complete --"' in zsh_script
        assert "${(qq)arg}" in zsh_script
        assert "${(Q)arg}" in zsh_script

    def test_directives(self, zsh_script: str) -> None:
        """Descriptions go through _describe, filters through _files."""
        assert "_describe" in zsh_script
        assert "_files -g" in zsh_script
        assert "_files -/" in zsh_script
        assert "noSpace=\"-S ''\"" in zsh_script
        assert 'keepOrder="-V"' in zsh_script


class TestFish:
    """Fish script content."""

    def test_registration(self, fish_script: str) -> None:
        """Previous completions are removed, both orders are registered."""
        assert "complete -c 'my-cli' -e" in fish_script
        assert "complete -c 'my-cli' -n '__my_cli_clear_perform_completion_once_result'" in fish_script
        assert "complete -k -c 'my-cli'" in fish_script
        assert "-f -a '$__my_cli_comp_results'" in fish_script

    def test_request(self, fish_script: str) -> None:
        """The request is built from the command line tokens."""
        assert "set -l requestComp '/usr/bin/node /path/my-cli complete --'" in fish_script
        assert "commandline -opc" in fish_script
        assert "commandline -ct" in fish_script
        assert "string escape" in fish_script


class TestPowerShell:
    """PowerShell script content."""

    def test_registration(self, powershell_script: str) -> None:
        """The script block is registered for the native command."""
        assert "[scriptblock]$__my_cliCompleterBlock" in powershell_script
        assert "Register-ArgumentCompleter -Native -CommandName 'my-cli' -ScriptBlock $__my_cliCompleterBlock" in powershell_script

    def test_request(self, powershell_script: str) -> None:
        """The request quotes every word and marks the end of the program's options."""
        assert "$RequestComp = \"& /usr/bin/node /path/my-cli complete '--' $QuotedArgs\"" in powershell_script
        assert "Invoke-Expression" in powershell_script
        assert "'^:(\\d+)$'" in powershell_script

    def test_directives(self, powershell_script: str) -> None:
        """Directive variables are set and used."""
        assert "$ShellCompDirectiveError=1" in powershell_script
        assert "$ShellCompDirectiveKeepOrder=32" in powershell_script
        assert "[System.Management.Automation.CompletionResult]::new" in powershell_script


# --- Syntax validation with real shells ---


@pytest.mark.skipif(not shutil.which("zsh"), reason="zsh not installed")
class TestZshSyntax:
    """Test zsh completion script syntax."""

    @pytest.mark.parametrize("name", ["my-cli", "weird name", "a'b"])
    def test_syntax_valid(self, name: str) -> None:
        """Zsh completion script should have valid syntax."""
        result = subprocess.run(
            ["zsh", "-n", "-c", generate_zsh(name, EXEC)],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, f"Zsh syntax error: {result.stderr}"


@pytest.mark.skipif(not shutil.which("bash"), reason="bash not installed")
class TestBashSyntax:
    """Test bash completion script syntax."""

    @pytest.mark.parametrize("name", ["my-cli", "weird name", "a'b"])
    def test_syntax_valid(self, name: str) -> None:
        """Bash completion script should have valid syntax."""
        result = subprocess.run(
            ["bash", "-n", "-c", generate_bash(name, EXEC)],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, f"Bash syntax error: {result.stderr}"


@pytest.mark.skipif(not shutil.which("fish"), reason="fish not installed")
class TestFishSyntax:
    """Test fish completion script syntax."""

    def test_syntax_valid(self, fish_script: str, tmp_path: Path) -> None:
        """Fish completion script should have valid syntax."""
        script_file = tmp_path / "completions.fish"
        script_file.write_text(fish_script)
        result = subprocess.run(
            ["fish", "--no-execute", str(script_file)],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, f"Fish syntax error: {result.stderr}"


@pytest.mark.skipif(not shutil.which("pwsh"), reason="pwsh not installed")
class TestPowerShellSyntax:
    """Test PowerShell completion script syntax."""

    def test_syntax_valid(self, powershell_script: str, tmp_path: Path) -> None:
        """The PowerShell parser should report no error."""
        script_file = tmp_path / "completions.ps1"
        script_file.write_text(powershell_script)
        command = (
            "$errors = $null; "
            f"[System.Management.Automation.Language.Parser]::ParseFile('{script_file}', [ref]$null, [ref]$errors) | Out-Null; "
            "if ($errors.Count -gt 0) { $errors | ForEach-Object { $_.Message }; exit 1 }"
        )
        result = subprocess.run(["pwsh", "-NoProfile", "-Command", command], capture_output=True, text=True)
        assert result.returncode == 0, f"PowerShell syntax error: {result.stdout}{result.stderr}"


RECORDING_PROGRAM = """
import os
import sys

args = sys.argv[sys.argv.index("--") + 1 :]
with open(os.environ["SHELLTAB_ARGS_FILE"], "w", encoding="utf-8") as stream:
    stream.write("|".join(args))
sys.stdout.write(os.environ["SHELLTAB_RESPONSE"])
"""

BASH_WORDBREAKS = "COMP_WORDBREAKS=$' \\t\\n\"\\'><=;|&(:'"


def run_bash_completion(
    tmp_path: Path,
    comp_line: str,
    response: str = ":0\n",
    program_name: str = "my-cli",
    exec_invocation: str | None = None,
) -> tuple[list[str], str | None]:
    """Press Tab at the end of `comp_line`.

    Returns COMPREPLY and the words the program received ("|"-joined),
    None when it was not called.
    """
    program = tmp_path / "recording_program.py"
    program.write_text(RECORDING_PROGRAM, encoding="utf-8")
    script = tmp_path / "completion.bash"
    invocation = exec_invocation or shlex.join([sys.executable, str(program)])
    script.write_text(generate_bash(program_name, invocation), encoding="utf-8")
    args_file = tmp_path / "received"

    driver = "\n".join(
        [
            f"source {shlex.quote(str(script))}",
            BASH_WORDBREAKS,
            f"COMP_LINE={shlex.quote(comp_line)}",
            "COMP_POINT=${#COMP_LINE}",
            f"__{program_name.replace('-', '_')}_complete",
            'for item in "${COMPREPLY[@]}"; do printf "%s\\n" "${item}"; done',
        ]
    )
    env = {
        **os.environ,
        "SHELLTAB_ARGS_FILE": str(args_file),
        "SHELLTAB_RESPONSE": response,
        "PYTHONPATH": str(Path(__file__).resolve().parents[1]),
    }
    env.pop("BASH_COMP_DEBUG_FILE", None)
    result = subprocess.run(
        ["bash", "--norc", "--noprofile", "-c", driver],
        capture_output=True,
        text=True,
        env=env,
        cwd=tmp_path,
        timeout=60,
    )
    assert result.returncode == 0, result.stderr
    received = args_file.read_text(encoding="utf-8") if args_file.exists() else None
    return result.stdout.splitlines(), received


@pytest.mark.skipif(not shutil.which("bash"), reason="bash not installed")
class TestBashRoundTrip:
    """The bash script talking to a program, without bash-completion loaded."""

    def test_trailing_space(self, tmp_path: Path) -> None:
        """A space before the cursor sends an empty last word."""
        reply, received = run_bash_completion(tmp_path, "my-cli dev ", "build\tBuild project\nstart\n:4\n")
        assert received == "dev|"
        assert reply == ["build", "start"]

    def test_partial_word(self, tmp_path: Path) -> None:
        reply, received = run_bash_completion(tmp_path, "my-cli de", "dev\tStart dev server\n:4\n")
        assert received == "de"
        assert reply == ["dev"]

    def test_inline_option_value(self, tmp_path: Path) -> None:
        """`--port=` stays one word, and bash only gets the part after "="."""
        reply, received = run_bash_completion(tmp_path, "my-cli dev --port=", "--port=3000\tdev\n--port=8080\talt\n:4\n")
        assert received == "dev|--port="
        assert reply == ["3000", "8080"]

    @pytest.mark.parametrize(
        ("comp_line", "expected"),
        [
            ('my-cli "a b" ', "a b|"),
            ("my-cli 'a b' c", "a b|c"),
            ("my-cli a\\ b ", "a b|"),
            ('my-cli x "unfinished wo', "x|unfinished wo"),
        ],
    )
    def test_quoted_words(self, tmp_path: Path, comp_line: str, expected: str) -> None:
        """Quoting is removed, embedded spaces are kept."""
        _, received = run_bash_completion(tmp_path, comp_line)
        assert received == expected

    def test_expansions_are_not_run(self, tmp_path: Path) -> None:
        """Words that could expand reach the program as typed."""
        _, received = run_bash_completion(tmp_path, 'my-cli "$(touch pwned)" ')
        assert received == '"$(touch pwned)"|'
        assert not (tmp_path / "pwned").exists()

    def test_error_directive(self, tmp_path: Path) -> None:
        """`:1` shows nothing, whatever came before it."""
        reply, _ = run_bash_completion(tmp_path, "my-cli ", "dev\nlint\n:1\n")
        assert reply == []

    def test_missing_directive(self, tmp_path: Path) -> None:
        """Output without a directive line is ignored."""
        reply, _ = run_bash_completion(tmp_path, "my-cli ", "dev\nlint\n")
        assert reply == []

    def test_demo_program(self, tmp_path: Path) -> None:
        """End to end, with the resolution engine answering."""
        invocation = shlex.join([sys.executable, "-m", "shelltab.demo"])
        reply, _ = run_bash_completion(tmp_path, "shelltab-demo dev --port ", program_name="shelltab-demo", exec_invocation=invocation)
        assert reply == ["3000", "8080"]
        reply, _ = run_bash_completion(tmp_path, "shelltab-demo dev --port=8", program_name="shelltab-demo", exec_invocation=invocation)
        assert reply == ["8080"]
