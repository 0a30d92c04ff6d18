"""create-npl -- scaffold NPL frontend projects.

Copies a frontend template, fills in tenant/app/package identifiers,
downloads the engine's OpenAPI document and drives npm to install, generate
the API client and build.
"""

__version__ = "0.1.0"
