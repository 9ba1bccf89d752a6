"""
Management command that creates (or refreshes) the category tree and one
canonical Service per leaf category.

Usage:
    python manage.py seed_categories
    python manage.py seed_categories --dry-run
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from catalog.models import ServiceCategory, Service
import logging

logger = logging.getLogger(__name__)

CATEGORY_TREE = [
    ('Beleza', [
        ('Cabelo', ['Corte masculino', 'Corte feminino']),
        ('Unhas', ['Manicure/Pedicure', 'Alongamento em gel/fibra']),
        ('Depilação', ['Cera', 'Fotodepilação/Laser']),
    ]),
    ('Consultoria', [
        ('Financeira', ['Planejamento pessoal/MEI', 'Impostos/Regularização']),
        ('Marketing', ['Social media/Conteúdo', 'SEO/Tráfego pago']),
    ]),
    ('Educação', [
        ('Reforço escolar', ['Matemática', 'Português/Redação']),
        ('Idiomas', ['Inglês', 'Espanhol']),
    ]),
    ('Eventos', [
        ('Buffet', ['Coffee break/Coquetel', 'Buffet completo']),
        ('Foto & Vídeo', ['Fotografia', 'Filmagem/Drone']),
    ]),
    ('Limpeza', [
        ('Residencial', ['Diarista/Limpeza de casa', 'Pós-obra']),
        ('Automotiva', ['Lavagem de carro', 'Higienização de estofados']),
    ]),
    ('Pets', ['Pet sitter', 'Dog walker', 'Banho e tosa', 'Adestramento']),
    ('Reformas', [
        ('Elétrica', ['Instalações/Quadro', 'Automação/Iluminação']),
        ('Pintura', ['Residencial/Comercial', 'Texturas/Efeitos']),
    ]),
    ('Saúde', ['Fisioterapia domiciliar', 'Psicologia (on-line/presencial)', 'Massoterapia']),
    ('Tecnologia', ['Suporte TI (PC/Notebook)', 'Desenvolvimento Web', 'Redes/Wi-Fi']),
    ('Transporte', ['Frete/Carreto', 'Mudanças', 'Motoboy/Entregas rápidas']),
]


class Command(BaseCommand):
    help = 'Cria a árvore de categorias e um serviço canônico por categoria folha'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Mostra o que seria criado sem gravar no banco',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        self.stdout.write(self.style.WARNING('=' * 70))
        self.stdout.write(self.style.WARNING('Seeding categories'))
        self.stdout.write(self.style.WARNING('=' * 70 + '\n'))

        if dry_run:
            self._print_tree(CATEGORY_TREE)
            return

        with transaction.atomic():
            created = self._upsert_tree(CATEGORY_TREE, parent=None)
            services = self._seed_leaf_services()

        logger.info(f"seed_categories: {created} categories created, {services} services created")
        self.stdout.write(self.style.SUCCESS(
            f'\n✅ {created} categorias novas, {services} serviços canônicos novos.'
        ))

    def _upsert_tree(self, nodes, parent):
        created_count = 0
        for node in nodes:
            name, children = node if isinstance(node, tuple) else (node, [])
            category, created = ServiceCategory.objects.update_or_create(
                name=name,
                defaults={
                    'parent': parent,
                    'is_leaf': not children,
                    'is_active': True,
                },
            )
            created_count += int(created)
            if children:
                created_count += self._upsert_tree(children, category)
        return created_count

    def _seed_leaf_services(self):
        created_count = 0
        for leaf in ServiceCategory.objects.filter(is_leaf=True, is_active=True):
            service = Service.objects.filter(category=leaf).first()
            if service:
                service.name = leaf.name
                service.is_active = True
                service.save(update_fields=['name', 'is_active'])
            else:
                Service.objects.create(
                    name=leaf.name,
                    description=f'Serviço: {leaf.name}',
                    category=leaf,
                )
                created_count += 1
        return created_count

    def _print_tree(self, nodes, depth=0):
        for node in nodes:
            name, children = node if isinstance(node, tuple) else (node, [])
            self.stdout.write(f"{'  ' * depth}- {name}")
            self._print_tree(children, depth + 1)
