from django.core.management.base import BaseCommand
from django.db import IntegrityError, transaction

from projects.models import VideoType, Tag

VIDEO_TYPES = ["Institucional", "Comercial", "Tutorial", "Evento", "Webinar"]
TAGS = ["Marketing", "Vendas", "Educação", "Produto", "Evento", "Tech", "Q1", "Promo"]


class Command(BaseCommand):
    help = "Seeds the default video types and tags. Safe to run repeatedly."

    def _seed(self, model, names):
        created = 0
        for name in names:
            try:
                with transaction.atomic():
                    model.objects.create(name=name)
                created += 1
            except IntegrityError:
                # Already seeded
                continue
        return created

    def handle(self, *args, **options):
        self.stdout.write("🌱 Seeding lookups...")

        types_created = self._seed(VideoType, VIDEO_TYPES)
        tags_created = self._seed(Tag, TAGS)

        self.stdout.write(self.style.SUCCESS(
            f"Video types created: {types_created}, tags created: {tags_created}"
        ))
