"""
Command-line interface for photo-index.

Commands:
    init-db: Create the catalog tables
    index: Index the originals tree into the catalog

Example:
    $ photo-index --config config.yaml init-db
    $ photo-index --config config.yaml index --verbose
"""

import sys
from datetime import timedelta
from pathlib import Path

import click

from photo_index.classifier import load_classifier
from photo_index.config import (
    get_database_uri,
    get_indexer_settings,
    get_originals_root,
    get_thumbnails_root,
    load_config,
)
from photo_index.db import (
    CatalogStore,
    create_catalog_engine,
    create_schema,
    make_session_factory,
    session_scope,
)
from photo_index.geo import NullGeocoder, OpenStreetMapGeocoder
from photo_index.indexer import GroupIndexer, LocationResolver, RecordMerger, TagResolver, TreeIndexer
from photo_index.utils import setup_logging


@click.group()
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, path_type=Path),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--log-file', type=click.Path(path_type=Path), help='Also write the log to this file')
@click.pass_context
def main(ctx, config_path, verbose, log_file):
    """photo-index - keep a photo catalog in sync with your originals."""
    ctx.ensure_object(dict)

    setup_logging('DEBUG' if verbose else 'INFO', log_file)

    try:
        ctx.obj['config'] = load_config(config_path)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))


@main.command('init-db')
@click.pass_context
def init_db(ctx):
    """Create the catalog tables."""
    uri = get_database_uri(ctx.obj['config'])

    create_schema(create_catalog_engine(uri))

    click.echo(f"Catalog ready: {uri}")


@main.command()
@click.pass_context
def index(ctx):
    """Index all photos below the configured originals directory.

    Photos seen before are updated, new ones are added. Running the
    command twice on an unchanged tree adds nothing.
    """
    config = ctx.obj['config']

    try:
        originals_root = get_originals_root(config)
    except ValueError as e:
        raise click.ClickException(str(e))

    thumbnails_root = get_thumbnails_root(config)
    settings = get_indexer_settings(config)

    try:
        classifier = load_classifier(settings.classifier)
    except ValueError as e:
        raise click.ClickException(str(e))

    engine = create_catalog_engine(get_database_uri(config))
    create_schema(engine)

    if settings.geocoder.enabled:
        geocoder = OpenStreetMapGeocoder(
            url=settings.geocoder.url,
            user_agent=settings.geocoder.user_agent,
            timeout=settings.geocoder.timeout,
        )
    else:
        geocoder = NullGeocoder()

    with session_scope(make_session_factory(engine)) as session:
        store = CatalogStore(session)
        tags = TagResolver(
            store,
            classifier,
            thumbnails_root,
            threshold_divisor=settings.label_threshold_divisor,
            workers=settings.classifier_workers,
        )
        locations = LocationResolver(store, geocoder, tags)
        merger = RecordMerger(
            store,
            originals_root,
            thumbnails_root,
            tags,
            locations,
            staleness=timedelta(minutes=settings.staleness_minutes),
        )
        tree = TreeIndexer(originals_root, GroupIndexer(merger, originals_root))

        click.echo(f"Indexing: {originals_root}")
        indexed = tree.index_all()

        click.echo(f"\nIndexed {len(indexed)} files")
        for table, count in store.counts().items():
            click.echo(f"  {table}: {count}")


if __name__ == '__main__':
    sys.exit(main())
