"""RFC 6570 URI Template engine.

This package turns template strings such as ``/users/{id}{?fields*}`` into
URIs. It provides :class:`Template`, the only entry point most callers need,
plus the extension points for custom value rendering:

* :class:`ExpressionExpander` -- base class for custom expanders.
* :class:`TemplateParameter` -- binds a custom expander to one variable.
* :class:`CachingExpanderRegistry` -- thread-safe expander cache, shareable
  between templates.

Example::

    from urispec.template import Template

    Template.create("{?list*}").expand({"list": ["red", "green", "blue"]})
    # '?list=red&list=green&list=blue'
"""

from urispec.template.composite import UriComposite
from urispec.template.expanders import ExpressionExpander
from urispec.template.parameters import TemplateParameter
from urispec.template.registry import CachingExpanderRegistry, ExpanderRegistry
from urispec.template.uri_template import Template

__all__ = [
    "CachingExpanderRegistry",
    "ExpanderRegistry",
    "ExpressionExpander",
    "Template",
    "TemplateParameter",
    "UriComposite",
]
