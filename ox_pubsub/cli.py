"""CLI commands for the OX pubsub engine."""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Optional, Tuple

import click

from ox_pubsub.config import PubSubConfig
from ox_pubsub.events import Publish, classify
from ox_pubsub.exceptions import PubSubError
from ox_pubsub.items import ItemExtractor
from ox_pubsub.models import Item
from ox_pubsub.options import OptionCodec
from ox_pubsub.services import payload_fields
from ox_pubsub.stanza import tostring
from ox_pubsub.uri import PubSubURI


def _load_config(path: Optional[str]) -> PubSubConfig:
    if path:
        return PubSubConfig.from_yaml(path)
    return PubSubConfig()


@click.group()
@click.option('--verbose', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """OX pubsub engine CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@cli.command('encode-options')
@click.option('--expire', help='Absolute expiry time (ISO-8601 with offset)')
@click.option('--option', 'options', multiple=True, help='Extra option as key=value')
@click.option('--config', help='Config file path')
def encode_options(expire: Optional[str], options: Tuple[str, ...], config: Optional[str]):
    """Print the subscribe-options form for the given options."""
    cfg = _load_config(config)

    values = {}
    for option in options:
        key, sep, value = option.partition('=')
        if not sep:
            raise click.BadParameter(f"expected key=value, got {option!r}", param_hint='--option')
        values[key] = value

    if expire:
        try:
            values['expire'] = datetime.fromisoformat(expire)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint='--expire')

    try:
        form = OptionCodec(cfg.options_namespace).encode(values)
    except PubSubError as e:
        raise click.ClickException(str(e))

    click.echo(tostring(form))


@cli.command('classify')
@click.argument('document', type=click.File('rb'))
@click.option('--service', required=True, help='Service address the document came from')
def classify_document(document, service: str):
    """Classify a push document the way the event router does."""
    base = PubSubURI.parse(service).base
    extractor = ItemExtractor(base, lambda entry: Item(**payload_fields(entry)))

    try:
        event = classify(ET.fromstring(document.read()), base, extractor)
    except PubSubError as e:
        raise click.ClickException(f"malformed document: {e}")

    if event is None:
        click.echo("dropped")
        return

    click.echo(type(event).__name__)
    if isinstance(event, Publish):
        for item in event.items:
            click.echo(f"  {item.uri}  {item.model_dump(exclude={'uri'}, mode='json')}")
    else:
        click.echo(f"  {event.uri}")


@cli.command()
@click.option('--config', help='Config file path')
def services(config: Optional[str]):
    """List configured pubsub services."""
    cfg = _load_config(config)

    if not cfg.services:
        click.echo("No services configured")
        return

    for name, service in cfg.services.items():
        state = "enabled" if service.enabled else "disabled"
        click.echo(f"{name}: xmpp:{service.address} ({state})")


def main():
    """Run the CLI."""
    cli()


if __name__ == '__main__':
    main()
