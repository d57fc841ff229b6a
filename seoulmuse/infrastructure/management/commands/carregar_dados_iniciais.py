from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from seoulmuse.infrastructure import seeds
from seoulmuse.infrastructure.mappers import ClienteMapper, CupomMapper, PedidoMapper, ProdutoMapper, get_model


class Command(BaseCommand):
    help = 'Carrega o catálogo, pedidos, clientes e cupons iniciais da loja (idempotente)'

    def add_arguments(self, parser):
        parser.add_argument('--admin-email', default='admin@seoulmuse.com',
                            help='E-mail do usuário administrativo do painel')
        parser.add_argument('--admin-senha', default=None,
                            help='Se informada, cria o usuário administrativo com esta senha')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Criando dados iniciais...')

        Produto = get_model('catalog', 'Produto')
        for produto in seeds.produtos_iniciais():
            dados = ProdutoMapper.to_dict(produto)
            dados.pop('id')
            model, created = Produto.objects.get_or_create(pk=produto.id, defaults=dados)
            if created:
                self.stdout.write(self.style.SUCCESS(f'Criado produto "{model.nome}" ({model.sku})'))

        Pedido = get_model('vendas', 'Pedido')
        ItemPedido = get_model('vendas', 'ItemPedido')
        for pedido in seeds.pedidos_iniciais():
            if Pedido.objects.filter(pk=pedido.id).exists():
                continue
            model = PedidoMapper.to_model(pedido)
            model.save(force_insert=True)
            ItemPedido.objects.bulk_create(PedidoMapper.itens_to_models(pedido, model))
            self.stdout.write(self.style.SUCCESS(f'Criado pedido {model.id}'))

        Cupom = get_model('vendas', 'Cupom')
        for cupom in seeds.cupons_iniciais():
            if not Cupom.objects.filter(codigo=cupom.codigo).exists():
                CupomMapper.to_model(cupom).save(force_insert=True)
                self.stdout.write(self.style.SUCCESS(f'Criado cupom {cupom.codigo}'))

        Cliente = get_model('vendas', 'Cliente')
        for cliente in seeds.clientes_iniciais():
            if not Cliente.objects.filter(email=cliente.email).exists():
                ClienteMapper.to_model(cliente).save(force_insert=True)
                self.stdout.write(self.style.SUCCESS(f'Criado cliente {cliente.email}'))

        if options['admin_senha']:
            User = get_user_model()
            email = options['admin_email']
            user, created = User.objects.get_or_create(
                username=email, defaults={'email': email, 'is_staff': True, 'is_superuser': True}
            )
            if created:
                user.set_password(options['admin_senha'])
                user.save()
                self.stdout.write(self.style.SUCCESS(f'Criado administrador {email}'))

        self.stdout.write(self.style.SUCCESS('Dados iniciais carregados com sucesso!'))
