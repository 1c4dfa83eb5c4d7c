"""
Placeholder illustration references for storybook pages.
"""

from .resolver import (
    IllustrationRef,
    IllustrationReferenceBuilder,
    IllustrationResolver,
    PicsumReferenceBuilder,
    PlaceholderReferenceBuilder,
    REFERENCE_BUILDERS,
    description_hash,
    description_seed,
    make_reference_builder,
)

__all__ = [
    "IllustrationRef",
    "IllustrationReferenceBuilder",
    "IllustrationResolver",
    "PicsumReferenceBuilder",
    "PlaceholderReferenceBuilder",
    "REFERENCE_BUILDERS",
    "description_hash",
    "description_seed",
    "make_reference_builder",
]
