"""Starter .gitstate.toml template."""

DEFAULT_TOML = """\
# gitstate configuration
version = "1.0"

[git]
binary = "git"
timeout = 30              # seconds per git invocation
base_rev = "HEAD"         # staged changes are measured against this revision

[output]
format = "terminal"       # terminal | json
show_summary = true
"""
