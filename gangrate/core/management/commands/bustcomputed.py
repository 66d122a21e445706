import sys

import click
from django.core.management.base import BaseCommand

from gangrate.core.cost.errors import CacheTransportError, ComputationInputError
from gangrate.core.cost.services import get_cost_services
from gangrate.core.cost.tags import ALL_COMPUTED, EntityKind, ParentIds, tags_for_change
from gangrate.core.models import Gang
from gangrate.models import format_cost_display


class Command(BaseCommand):
    help = "Invalidates cached gang ratings and fighter costs"

    def add_arguments(self, parser):
        parser.add_argument(
            "--gang",
            action="append",
            default=[],
            help="Only invalidate this gang (repeatable)",
        )
        parser.add_argument(
            "--clear",
            action="store_true",
            help="Drop every entry in the cost cache, not just computed values",
        )
        parser.add_argument(
            "--verify",
            action="store_true",
            help="Report cached gang ratings that differ from a fresh computation",
        )

    def handle(self, *args, **options):
        services = get_cost_services()

        if options["verify"]:
            self.verify(services)

        try:
            if options["clear"]:
                services.cache.clear()
                click.echo("Cleared the cost cache")
            elif options["gang"]:
                for gang_id in options["gang"]:
                    services.cache.purge(
                        tags_for_change(
                            EntityKind.GANG, gang_id, ParentIds(gang_id=gang_id)
                        )
                    )
                    click.echo(f"Invalidated gang {gang_id}")
            else:
                services.cache.purge({ALL_COMPUTED})
                click.echo("Invalidated all computed costs")
        except CacheTransportError as e:
            click.echo(f"Error invalidating cost cache: {e}")
            sys.exit(1)

    def verify(self, services):
        stale = 0
        for gang in Gang.objects.order_by("name"):
            try:
                direct = services.reader.compute_gang_rating_direct(gang.id)
            except ComputationInputError:
                continue
            cached = services.reader.get_gang_rating(gang.id)
            if cached != direct:
                stale += 1
                click.echo(
                    f"Stale rating for {gang.name}: "
                    f"{format_cost_display(cached)} != {format_cost_display(direct)}"
                )
        click.echo(f"Verified ratings: {stale} stale")
