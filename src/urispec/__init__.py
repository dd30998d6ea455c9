"""urispec -- RFC 6570 URI Template expansion for declarative HTTP clients.

This package parses URI templates such as ``/repos/{owner}/{repo}{?page}``
once and expands them any number of times with fresh variables. It is the
request-line engine behind a declarative HTTP client: each templated method
argument becomes a template variable, optionally rendered by a custom
expander.

Typical usage::

    from urispec.template import Template

    template = Template.create("/repos/{owner}/{repo}/issues{?state,labels}")
    template.expand({"owner": "octocat", "repo": "hello", "state": "open"})
    # '/repos/octocat/hello/issues?state=open'

All four RFC 6570 levels are supported. A small command-line front end
(``urispec expand``, ``urispec inspect``) wraps the same engine.

Modules:
    template: The template engine (tokenizer, parser, expanders, registry).
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and variables-file loading.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes for the CLI.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
