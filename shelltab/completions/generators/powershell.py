"""PowerShell completion script generator."""

from __future__ import annotations

from .common import (
    COMPLETE_COMMAND,
    SCRIPT_DEBUG_ENV_VAR,
    comment_safe,
    directive_variables,
    powershell_double_quote_escape,
    powershell_quote,
    sanitize_identifier,
)

__all__ = ["generate_powershell"]


def generate_powershell(program_name: str, exec_invocation: str) -> str:
    """Generate the PowerShell completion script.

    Works with Windows PowerShell 5.1 and PowerShell 7+, whose native
    argument passing differs for empty strings.

    Args:
        program_name: Command the completion is registered for
        exec_invocation: PowerShell text running the program

    Returns:
        The PowerShell completion script content
    """
    ident = sanitize_identifier(program_name)
    name = powershell_quote(program_name)
    executable = powershell_double_quote_escape(exec_invocation)
    directives = directive_variables("$ShellCompDirective{name}={value}")

    return rf"""# powershell completion for {comment_safe(program_name)}           -*- shell-script -*-
# Generated by: {comment_safe(program_name)} {COMPLETE_COMMAND} powershell

function __{ident}_debug {{
    if ($env:{SCRIPT_DEBUG_ENV_VAR}) {{
        "$args" | Out-File -Append -FilePath "$env:{SCRIPT_DEBUG_ENV_VAR}"
    }}
}}

filter __{ident}_escapeStringWithSpecialChars {{
    $_ -replace '\s|#|@|\$|;|,|''|\{{|\}}|\(|\)|"|`|\||<|>|&','`$&'
}}

function __{ident}_completePaths {{
    param(
        [string]$WordToComplete,
        [string]$Base,
        [string[]]$Extensions,
        [switch]$DirectoriesOnly
    )
    $Parent = Split-Path -Parent $WordToComplete
    $Pattern = "$WordToComplete*"
    if ($Base) {{
        $Pattern = Join-Path $Base $Pattern
    }}
    Get-ChildItem -Path $Pattern -ErrorAction SilentlyContinue | Where-Object {{
        $_.PSIsContainer -or (-not $DirectoriesOnly -and ($Extensions.Count -eq 0 -or $Extensions -contains $_.Extension.TrimStart('.')))
    }} | ForEach-Object {{
        $Completion = $_.Name
        if ($Parent) {{
            $Completion = Join-Path $Parent $_.Name
        }}
        if ($_.PSIsContainer) {{
            $Completion += [System.IO.Path]::DirectorySeparatorChar
        }}
        [System.Management.Automation.CompletionResult]::new(($Completion | __{ident}_escapeStringWithSpecialChars), $Completion, 'ProviderItem', $Completion)
    }}
}}

[scriptblock]$__{ident}CompleterBlock = {{
    param(
        $WordToComplete,
        $CommandAst,
        $CursorPosition
    )

    __{ident}_debug ""
    __{ident}_debug "========= starting completion logic =========="
    __{ident}_debug "WordToComplete: $WordToComplete Command: $CommandAst CursorPosition: $CursorPosition"

{directives}

    # the words after the program name, up to the cursor
    $Arguments = @()
    foreach ($Element in @($CommandAst.CommandElements | Select-Object -Skip 1)) {{
        if ($Element.Extent.StartOffset -ge $CursorPosition) {{
            break
        }}
        if ($Element.Extent.EndOffset -gt $CursorPosition) {{
            $Text = $Element.Extent.Text.Substring(0, $CursorPosition - $Element.Extent.StartOffset)
        }} elseif ($Element -is [System.Management.Automation.Language.StringConstantExpressionAst]) {{
            $Text = $Element.Value
        }} else {{
            $Text = $Element.Extent.Text
        }}
        $Arguments += $Text
    }}

    $QuotedArgs = ($Arguments | ForEach-Object {{ "'" + ($_ -replace "'", "''") + "'" }}) -join ' '
    $RequestComp = "& {executable} {COMPLETE_COMMAND} '--' $QuotedArgs"

    if ($WordToComplete -eq "") {{
        # the cursor follows a space: ask for the completions of an empty word
        if ($PSVersionTable.PSVersion -lt [version]'7.3.0' -or $PSNativeCommandArgumentPassing -eq 'Legacy') {{
            $RequestComp += ' `"`"'
        }} else {{
            $RequestComp += ' ""'
        }}
    }}

    __{ident}_debug "Calling $RequestComp"
    # stderr is not part of the response
    $Out = @(Invoke-Expression -Command $RequestComp 2>$null)
    __{ident}_debug "The completion output is: $Out"

    $Directive = 0
    if ($Out.Count -gt 0 -and $Out[-1] -match '^:(\d+)$') {{
        $Directive = [int]$Matches[1]
        if ($Out.Count -gt 1) {{
            $Out = $Out[0..($Out.Count - 2)]
        }} else {{
            $Out = @()
        }}
    }} else {{
        __{ident}_debug "No directive received, the program probably failed"
        $Out = @()
    }}
    __{ident}_debug "The completion directive is: $Directive"

    if (($Directive -band $ShellCompDirectiveError) -ne 0) {{
        __{ident}_debug "Received error directive, showing nothing"
        # an empty string keeps PowerShell from completing paths
        ""
        return
    }}

    [Array]$Values = $Out | Where-Object {{ $_ -ne "" }} | ForEach-Object {{
        $Name, $Description = $_.Split("`t", 2)
        if (-not $Description) {{
            # CompletionResult refuses an empty tooltip
            $Description = " "
        }}
        @{{Name = "$Name"; Description = "$Description"}}
    }}

    if (($Directive -band $ShellCompDirectiveFilterFileExt) -ne 0) {{
        $Extensions = @($Values | ForEach-Object {{ $_.Name.TrimStart('.') }})
        __{ident}_completePaths -WordToComplete $WordToComplete -Extensions $Extensions
        return
    }}
    if (($Directive -band $ShellCompDirectiveFilterDirs) -ne 0) {{
        $Base = ""
        if ($Values.Count -gt 0) {{
            $Base = $Values[0].Name
        }}
        __{ident}_completePaths -WordToComplete $WordToComplete -Base $Base -DirectoriesOnly
        return
    }}

    if (-not $Values -or $Values.Count -eq 0) {{
        if (($Directive -band $ShellCompDirectiveNoFileComp) -ne 0) {{
            __{ident}_debug "No file completion"
            ""
        }}
        return
    }}

    if (($Directive -band $ShellCompDirectiveKeepOrder) -eq 0) {{
        $Values = @($Values | Sort-Object -Property {{ $_.Name }})
    }}

    # PowerShell does not add a space after a native command completion
    $Space = ""
    if ($Values.Count -eq 1 -and ($Directive -band $ShellCompDirectiveNoSpace) -eq 0) {{
        $Space = " "
    }}

    $Values | ForEach-Object {{
        [System.Management.Automation.CompletionResult]::new(($_.Name | __{ident}_escapeStringWithSpecialChars) + $Space, $_.Name, 'ParameterValue', $_.Description)
    }}
}}

Register-ArgumentCompleter -Native -CommandName {name} -ScriptBlock $__{ident}CompleterBlock
"""
