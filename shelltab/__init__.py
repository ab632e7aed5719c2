"""shelltab - dynamic shell completions for command-line programs.

A program describes its commands, options and positional arguments as a
command tree. The completion engine maps a partially typed command line to
an ordered list of candidates plus a directive, and the shell generators emit
bash, zsh, fish and PowerShell scripts that query the program on every Tab
press using a small line-based protocol.
"""
