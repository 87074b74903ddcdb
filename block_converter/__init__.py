"""block_converter - migrate legacy HTML into comment-delimited block markup.

Quick usage::

    from block_converter import convert

    print(convert("<p>Content to migrate</p><h1>Heading 01</h1>"))
    # <!-- wp:paragraph --><p>Content to migrate</p><!-- /wp:paragraph -->
    #
    # <!-- wp:heading {"level":1} --><h1>Heading 01</h1><!-- /wp:heading -->

With oEmbed lookups and local media storage::

    from block_converter import BlockConverter, LocalMediaStore, OEmbedClient

    converter = BlockConverter(
        fetch_metadata=OEmbedClient(),
        media_resolver=LocalMediaStore("./uploads", "https://cdn.example.com/uploads"),
    )
    markup = converter.convert(legacy_html)

Extension points::

    from block_converter import Block, register_tag_rule

    register_tag_rule("figure", lambda node: Block("image", {}, str(node)))
"""

from block_converter.block import Block
from block_converter.config import ConverterSettings, load_settings
from block_converter.converter import BlockConverter, convert
from block_converter.exceptions import (
    BlockConverterError,
    ConfigError,
    FetchError,
    MediaError,
    OEmbedError,
)
from block_converter.media import LocalMediaStore, MediaResolver, PassthroughMediaResolver
from block_converter.oembed import OEmbedClient, ProviderMetadata, fetch_oembed_metadata
from block_converter.rules import (
    clear_tag_rules,
    get_tag_rule,
    register_tag_rule,
    unregister_tag_rule,
)

__version__ = "0.1.0"
__all__ = [
    "Block",
    "BlockConverter",
    "BlockConverterError",
    "ConfigError",
    "ConverterSettings",
    "FetchError",
    "LocalMediaStore",
    "MediaError",
    "MediaResolver",
    "OEmbedClient",
    "OEmbedError",
    "PassthroughMediaResolver",
    "ProviderMetadata",
    "clear_tag_rules",
    "convert",
    "fetch_oembed_metadata",
    "get_tag_rule",
    "load_settings",
    "register_tag_rule",
    "unregister_tag_rule",
]
