"""vulcan-prd: publish data product PRDs to a central registry repository.

A PRD markdown file is committed to prds/{domain}/{slug}.md on a new
branch of the registry repo, registry.json is upserted alongside it, and a
pull request is opened against the base branch.
"""

__version__ = "1.0.0"
