"""
Camada de Infraestrutura: Implementação dos Repositórios sobre o Django ORM.

Esta camada traduz as operações abstratas definidas nas Portas do Core
em chamadas concretas ao banco relacional. As garantias de consistência
(SKU único, baixa de estoque condicional) ficam a cargo do banco.
"""
import functools
import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F, Q, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

# Importações da Camada CORE (ENTIDADES e INTERFACES)
from seoulmuse.core.catalogo import CAMPOS_ORDENACAO, LIMITE_ESTOQUE_BAIXO
from seoulmuse.core.entities import (
    Carrinho, Chamado, Cliente, Cupom, FiltrosCatalogo, ItemCarrinho, Pedido, Produto,
    RegistroAuditoria, StatusChamado, StatusPedido, StatusProduto, gerar_id,
)
from seoulmuse.core.exceptions import (
    BaseErroCore,
    DadosInvalidosError,
    EstoqueInsuficienteError,
    PersistenciaError,
    ProdutoNaoEncontradoError,
    SkuDuplicadoError,
)
from seoulmuse.core.ports import (
    IAuditoriaRepository,
    ICarrinhoRepository,
    IChamadoRepository,
    IClienteRepository,
    ICupomRepository,
    IPedidoRepository,
    IProdutoRepository,
)

from .mappers import (
    ChamadoMapper, ClienteMapper, CupomMapper, ItemCarrinhoMapper, PedidoMapper, ProdutoMapper,
    RegistroAuditoriaMapper, get_model,
)

logger = logging.getLogger(__name__)


def traduzir_erros_banco(metodo):
    """Converte falhas do banco em PersistenciaError, preservando os erros de negócio."""
    @functools.wraps(metodo)
    def wrapper(*args, **kwargs):
        try:
            return metodo(*args, **kwargs)
        except BaseErroCore:
            raise
        except DatabaseError as e:
            logger.error("Falha de banco em %s: %s", metodo.__qualname__, e)
            raise PersistenciaError(f"Falha ao acessar o banco de dados: {e}")
    return wrapper


# ====================================================================
# 1. CATÁLOGO
# ====================================================================

class ProdutoRepositoryDjango(IProdutoRepository):
    """Implementação do Catálogo usando o Django ORM."""

    CAMPOS_ATUALIZAVEIS = [
        'sku', 'sku_normalizado', 'nome', 'preco', 'categoria', 'status',
        'colecao', 'imagem', 'calor_social', 'avaliacao', 'data_atualizacao',
    ]

    @property
    def ProdutoModel(self):
        return get_model('catalog', 'Produto')

    def buscar_por_id(self, produto_id: str) -> Optional[Produto]:
        try:
            return ProdutoMapper.to_entity(self.ProdutoModel.objects.get(pk=produto_id))
        except self.ProdutoModel.DoesNotExist:
            return None

    def listar(self, filtros: FiltrosCatalogo) -> List[Produto]:
        qs = self.ProdutoModel.objects.all()

        if not filtros.status:
            qs = qs.exclude(status=StatusProduto.ARQUIVADO.value)
        elif filtros.status != 'All':
            qs = qs.filter(status=filtros.status)

        if filtros.categoria and filtros.categoria != 'All':
            qs = qs.filter(categoria=filtros.categoria)

        if filtros.nivel_estoque == 'Low':
            qs = qs.filter(estoque__gte=1, estoque__lt=LIMITE_ESTOQUE_BAIXO)
        elif filtros.nivel_estoque == 'Out':
            qs = qs.filter(estoque=0)

        busca = (filtros.busca or '').strip()
        if busca:
            qs = qs.filter(Q(nome__icontains=busca) | Q(sku__icontains=busca) | Q(colecao__icontains=busca))

        if filtros.preco_min is not None:
            qs = qs.filter(preco__gte=filtros.preco_min)
        if filtros.preco_max is not None:
            qs = qs.filter(preco__lte=filtros.preco_max)

        expressao = self._expressao_ordenacao(filtros.ordenar_por)
        expressao = expressao.desc() if filtros.ordem == 'desc' else expressao.asc()
        # Empate sempre desfeito pelo id crescente
        qs = qs.order_by(expressao, 'id')
        return [ProdutoMapper.to_entity(model) for model in qs]

    def _expressao_ordenacao(self, campo_api: str):
        atributo, padrao = CAMPOS_ORDENACAO[campo_api]
        campo = self.ProdutoModel._meta.get_field(atributo)
        if campo.null:
            # Valor ausente ordena como zero/vazio
            return Coalesce(F(atributo), Value(padrao), output_field=campo.__class__())
        return F(atributo)

    @traduzir_erros_banco
    def salvar(self, produto: Produto) -> Produto:
        """Insere ou atualiza. A coluna única sku_normalizado rejeita SKUs repetidos."""
        existente = self.ProdutoModel.objects.filter(pk=produto.id).first() if produto.id else None
        instante = timezone.now()

        if existente is None:
            produto = replace(
                produto,
                id=produto.id or gerar_id('prod-'),
                data_criacao=produto.data_criacao or instante,
            )
        else:
            produto = replace(produto, data_criacao=existente.data_criacao, data_atualizacao=instante)

        model = ProdutoMapper.to_model(produto, existente)
        try:
            with transaction.atomic():
                if existente is None:
                    model.save(force_insert=True)
                else:
                    # Estoque só muda por ajustar_estoque ou pela baixa do pedido
                    model.save(update_fields=self.CAMPOS_ATUALIZAVEIS)
                    model.refresh_from_db(fields=['estoque'])
        except IntegrityError:
            conflitante = (
                self.ProdutoModel.objects
                .filter(sku_normalizado=produto.sku_normalizado)
                .exclude(pk=produto.id)
                .first()
            )
            if conflitante is None:
                raise
            raise SkuDuplicadoError(conflitante.sku, produto_id=conflitante.id)
        return ProdutoMapper.to_entity(model)

    @traduzir_erros_banco
    def ajustar_estoque(self, produto_id: str, delta: int) -> Optional[Tuple[int, int]]:
        with transaction.atomic():
            try:
                model = self.ProdutoModel.objects.select_for_update().get(pk=produto_id)
            except self.ProdutoModel.DoesNotExist:
                return None

            anterior = model.estoque
            novo = max(0, anterior + delta)
            if novo != anterior:
                model.estoque = novo
                model.data_atualizacao = timezone.now()
                model.save(update_fields=['estoque', 'data_atualizacao'])
            return anterior, novo

    @traduzir_erros_banco
    def arquivar(self, produto_id: str) -> bool:
        atualizados = self.ProdutoModel.objects.filter(pk=produto_id).update(
            status=StatusProduto.ARQUIVADO.value,
            data_atualizacao=timezone.now(),
        )
        return atualizados > 0

    @traduzir_erros_banco
    def remover(self, produto_id: str) -> bool:
        # CASCADE nas linhas de carrinho e na relação de lista de desejos
        removidos, _ = self.ProdutoModel.objects.filter(pk=produto_id).delete()
        return removidos > 0


# ====================================================================
# 2. PEDIDOS
# ====================================================================

class PedidoRepositoryDjango(IPedidoRepository):
    """Implementação do PedidoRepository usando o Django ORM."""

    @property
    def PedidoModel(self):
        return get_model('vendas', 'Pedido')

    @property
    def ItemPedidoModel(self):
        return get_model('vendas', 'ItemPedido')

    @property
    def ProdutoModel(self):
        return get_model('catalog', 'Produto')

    @traduzir_erros_banco
    def criar_pedido(self, pedido: Pedido, baixas_estoque: Dict[str, int]) -> Pedido:
        """
        Baixa condicional de estoque (UPDATE ... WHERE estoque >= quantidade) para cada
        produto e gravação do pedido, tudo na mesma transação. Qualquer baixa que não
        afete nenhuma linha desfaz a transação inteira.
        """
        with transaction.atomic():
            # Ordem fixa de atualização entre pedidos concorrentes
            for produto_id, quantidade in sorted(baixas_estoque.items()):
                atualizados = self.ProdutoModel.objects.filter(
                    pk=produto_id, estoque__gte=quantidade
                ).update(estoque=F('estoque') - quantidade)

                if not atualizados:
                    atual = self.ProdutoModel.objects.filter(pk=produto_id).values_list('estoque', flat=True).first()
                    if atual is None:
                        raise ProdutoNaoEncontradoError(produto_id)
                    raise EstoqueInsuficienteError(
                        produto_id=produto_id, estoque_atual=atual, quantidade_solicitada=quantidade
                    )

            model = PedidoMapper.to_model(pedido)
            model.save(force_insert=True)
            self.ItemPedidoModel.objects.bulk_create(PedidoMapper.itens_to_models(pedido, model))

        return self.buscar_por_id(pedido.id)

    def buscar_por_id(self, pedido_id: str) -> Optional[Pedido]:
        try:
            model = self.PedidoModel.objects.prefetch_related('itens').get(pk=pedido_id)
            return PedidoMapper.to_entity(model)
        except self.PedidoModel.DoesNotExist:
            return None

    def listar(self, status: Optional[StatusPedido] = None) -> List[Pedido]:
        qs = self.PedidoModel.objects.prefetch_related('itens')
        if status:
            qs = qs.filter(status=StatusPedido(status).value)
        qs = qs.order_by('-data_pedido', 'id')
        return [PedidoMapper.to_entity(model) for model in qs]

    @traduzir_erros_banco
    def atualizar_status(self, pedido_id: str, novo_status: StatusPedido,
                         status_esperado: Optional[StatusPedido] = None) -> bool:
        """Atualização condicional: com status_esperado, só altera se o pedido ainda estiver nele."""
        qs = self.PedidoModel.objects.filter(pk=pedido_id)
        if status_esperado is not None:
            qs = qs.filter(status=StatusPedido(status_esperado).value)
        return qs.update(status=StatusPedido(novo_status).value) > 0

    @traduzir_erros_banco
    def atualizar_rastreio(self, pedido_id: str, codigo_rastreio: str) -> bool:
        return self.PedidoModel.objects.filter(pk=pedido_id).update(codigo_rastreio=codigo_rastreio) > 0


# ====================================================================
# 3. CUPONS E CLIENTES
# ====================================================================

class CupomRepositoryDjango(ICupomRepository):

    @property
    def CupomModel(self):
        return get_model('vendas', 'Cupom')

    def buscar_por_codigo(self, codigo: str) -> Optional[Cupom]:
        model = self.CupomModel.objects.filter(codigo=(codigo or '').strip().upper()).first()
        return CupomMapper.to_entity(model)

    def listar(self) -> List[Cupom]:
        return [CupomMapper.to_entity(model) for model in self.CupomModel.objects.order_by('codigo')]

    @traduzir_erros_banco
    def salvar(self, cupom: Cupom) -> Cupom:
        existente = self.CupomModel.objects.filter(pk=cupom.id).first() if cupom.id else None
        if existente is None:
            cupom = replace(cupom, id=cupom.id or gerar_id('cpn-'))

        model = CupomMapper.to_model(cupom, existente)
        try:
            with transaction.atomic():
                model.save(force_insert=existente is None)
        except IntegrityError:
            raise DadosInvalidosError(f"O código de cupom '{cupom.codigo}' já existe.")
        return CupomMapper.to_entity(model)

    @traduzir_erros_banco
    def deletar(self, cupom_id: str) -> None:
        self.CupomModel.objects.filter(pk=cupom_id).delete()

    @traduzir_erros_banco
    def registrar_uso(self, cupom_id: str) -> None:
        self.CupomModel.objects.filter(pk=cupom_id).update(quantidade_usos=F('quantidade_usos') + 1)


class ClienteRepositoryDjango(IClienteRepository):

    @property
    def ClienteModel(self):
        return get_model('vendas', 'Cliente')

    @property
    def ProdutoModel(self):
        return get_model('catalog', 'Produto')

    def buscar_por_id(self, cliente_id: str) -> Optional[Cliente]:
        model = self.ClienteModel.objects.filter(pk=cliente_id).first()
        return ClienteMapper.to_entity(model)

    def buscar_por_email(self, email: str) -> Optional[Cliente]:
        model = self.ClienteModel.objects.filter(email=(email or '').strip().lower()).first()
        return ClienteMapper.to_entity(model)

    def listar(self) -> List[Cliente]:
        qs = self.ClienteModel.objects.prefetch_related('lista_desejos').order_by('id')
        return [ClienteMapper.to_entity(model) for model in qs]

    @traduzir_erros_banco
    def salvar(self, cliente: Cliente) -> Cliente:
        existente = self.ClienteModel.objects.filter(pk=cliente.id).first() if cliente.id else None
        if existente is None:
            cliente = replace(cliente, id=cliente.id or gerar_id('cust-'))

        model = ClienteMapper.to_model(cliente, existente)
        try:
            with transaction.atomic():
                model.save(force_insert=existente is None)
                model.lista_desejos.set(
                    self.ProdutoModel.objects.filter(pk__in=cliente.lista_desejos)
                )
        except IntegrityError:
            raise DadosInvalidosError(f"O e-mail '{cliente.email}' já está cadastrado.")
        return ClienteMapper.to_entity(model)

    @traduzir_erros_banco
    def registrar_compra(self, email: str, valor) -> bool:
        """Atualiza o valor acumulado do cliente. E-mail desconhecido é ignorado."""
        atualizados = self.ClienteModel.objects.filter(email=(email or '').strip().lower()).update(
            total_pedidos=F('total_pedidos') + 1,
            total_gasto=F('total_gasto') + valor,
        )
        return atualizados > 0

    @traduzir_erros_banco
    def alternar_desejo(self, cliente_id: str, produto_id: str) -> Optional[List[str]]:
        with transaction.atomic():
            model = self.ClienteModel.objects.select_for_update().filter(pk=cliente_id).first()
            if model is None:
                return None
            if model.lista_desejos.filter(pk=produto_id).exists():
                model.lista_desejos.remove(produto_id)
            else:
                model.lista_desejos.add(produto_id)
            return sorted(model.lista_desejos.values_list('id', flat=True))


# ====================================================================
# 4. CARRINHO
# ====================================================================

class CarrinhoRepositoryDjango(ICarrinhoRepository):
    """Carrinho por chave de sessão, uma linha por adição."""

    @property
    def ItemCarrinhoModel(self):
        return get_model('carrinho', 'ItemCarrinho')

    def buscar(self, chave: str) -> Carrinho:
        qs = self.ItemCarrinhoModel.objects.filter(chave_carrinho=chave).order_by('data_adicao', 'id_linha')
        return Carrinho(chave=chave, itens=[ItemCarrinhoMapper.to_entity(model) for model in qs])

    @traduzir_erros_banco
    def adicionar_item(self, chave: str, item: ItemCarrinho) -> Carrinho:
        self.ItemCarrinhoModel.objects.create(
            id_linha=item.id_linha,
            chave_carrinho=chave,
            produto_id=item.produto_id,
            nome=item.nome,
            preco_unitario=item.preco_unitario,
            quantidade=item.quantidade,
        )
        return self.buscar(chave)

    @traduzir_erros_banco
    def remover_item(self, chave: str, id_linha: str) -> Carrinho:
        self.ItemCarrinhoModel.objects.filter(chave_carrinho=chave, id_linha=id_linha).delete()
        return self.buscar(chave)

    @traduzir_erros_banco
    def limpar(self, chave: str) -> None:
        self.ItemCarrinhoModel.objects.filter(chave_carrinho=chave).delete()


# ====================================================================
# 5. SUPORTE E AUDITORIA
# ====================================================================

class AuditoriaRepositoryDjango(IAuditoriaRepository):
    """Trilha de auditoria sem limite de tamanho."""

    @property
    def RegistroModel(self):
        return get_model('suporte', 'RegistroAuditoria')

    @traduzir_erros_banco
    def registrar(self, registro: RegistroAuditoria) -> None:
        RegistroAuditoriaMapper.to_model(registro).save(force_insert=True)

    def listar(self, alvo_id: Optional[str] = None) -> List[RegistroAuditoria]:
        qs = self.RegistroModel.objects.all()
        if alvo_id:
            qs = qs.filter(alvo_id=alvo_id)
        return [RegistroAuditoriaMapper.to_entity(model) for model in qs.order_by('-data', '-id')]


class ChamadoRepositoryDjango(IChamadoRepository):

    @property
    def ChamadoModel(self):
        return get_model('suporte', 'Chamado')

    def buscar_por_id(self, chamado_id: str) -> Optional[Chamado]:
        return ChamadoMapper.to_entity(self.ChamadoModel.objects.filter(pk=chamado_id).first())

    def listar(self, status: Optional[StatusChamado] = None) -> List[Chamado]:
        qs = self.ChamadoModel.objects.all()
        if status:
            qs = qs.filter(status=StatusChamado(status).value)
        return [ChamadoMapper.to_entity(model) for model in qs.order_by('-data_atualizacao', 'id')]

    @traduzir_erros_banco
    def salvar(self, chamado: Chamado) -> Chamado:
        existente = self.ChamadoModel.objects.filter(pk=chamado.id).first() if chamado.id else None
        if chamado.id is None:
            chamado = replace(chamado, id=f"TKT-{gerar_id()[:8].upper()}")
        model = ChamadoMapper.to_model(chamado, existente)
        model.save(force_insert=existente is None)
        return ChamadoMapper.to_entity(model)
