# seoulmuse/core/use_cases.py
"""
Implementação dos Casos de Uso (Lógica de Negócio) da aplicação.
Esta camada depende apenas das Entidades e Portas (Interfaces) do Core,
garantindo o isolamento da lógica de negócio.
"""
import hashlib
import logging
import random
from contextlib import nullcontext
from datetime import date
from decimal import Decimal
from typing import Callable, ContextManager, Dict, List, Optional, Tuple

# Entidades e Exceções
from seoulmuse.core.entities import (
    Carrinho, Chamado, Cliente, Cupom, DadosCliente, Endereco, FiltrosCatalogo, ItemCarrinho,
    ItemPedido, Pedido, PoliticaExclusao, PrioridadeChamado, Produto, RegistroAuditoria,
    RespostaChamado, ResumoPrecos, StatusChamado, StatusCliente, StatusCupom, StatusPedido,
    StatusProduto, TipoDesconto, agora, gerar_id
)
from seoulmuse.core.exceptions import (
    CarrinhoVazioError,
    ChamadoNaoEncontradoError,
    ClienteNaoEncontradoError,
    DadosInvalidosError,
    EstoqueInsuficienteError,
    ItemNaoEncontradoError,
    PedidoNaoEncontradoError,
    ProdutoNaoEncontradoError,
    StatusInvalidoError,
)
from seoulmuse.core.catalogo import validar_filtros, LIMITE_ESTOQUE_BAIXO
from seoulmuse.core.formatadores import exportar_csv, gerar_fatura_texto
from seoulmuse.core.precificacao import calcular_precos

# Portas (Interfaces) - Importadas do seoulmuse/core/ports.py
from seoulmuse.core.ports import (
    IAuditoriaRepository,
    ICarrinhoRepository,
    IChamadoRepository,
    IClienteRepository,
    ICupomRepository,
    IGeradorTexto,
    IPedidoRepository,
    IProdutoRepository,
)

logger = logging.getLogger(__name__)

AUTOR_SISTEMA = 'system@seoulmuse.com'


def gerar_id_pedido() -> str:
    return f"ORD-{gerar_id()[:8].upper()}"


def gerar_codigo_rastreio() -> str:
    return f"SM-TRK-{random.randint(0, 999999):06d}"


def _status_pedido(valor) -> StatusPedido:
    try:
        return StatusPedido(valor)
    except ValueError:
        raise StatusInvalidoError(f"O status '{valor}' não é um status de pedido válido.")


# ====================================================================
# 1. CASOS DE USO DO CATÁLOGO
# ====================================================================

class GerenciarCatalogoUseCase:
    """
    Caso de Uso do Catálogo: listagem filtrada, gravação com SKU único,
    ajuste de estoque, exclusão (física ou arquivamento) e exportação.
    Toda mutação gera uma entrada na trilha de auditoria.
    """
    def __init__(self, produto_repo: IProdutoRepository, auditoria_repo: IAuditoriaRepository):
        self.produto_repo = produto_repo
        self.auditoria_repo = auditoria_repo

    def listar(self, filtros: Optional[FiltrosCatalogo] = None) -> List[Produto]:
        return self.produto_repo.listar(validar_filtros(filtros or FiltrosCatalogo()))

    def detalhar(self, produto_id: str) -> Produto:
        produto = self.produto_repo.buscar_por_id(produto_id)
        if not produto:
            raise ProdutoNaoEncontradoError(produto_id)
        return produto

    def salvar(self, produto: Produto, autor: str = AUTOR_SISTEMA) -> Produto:
        """Valida os campos obrigatórios e delega ao repositório a garantia de SKU único."""
        self._validar(produto)
        produto.sku = produto.sku.strip()
        existente = self.produto_repo.buscar_por_id(produto.id) if produto.id else None

        salvo = self.produto_repo.salvar(produto)

        if existente:
            self._auditar('UPDATE', salvo.id, f"Product details updated: {salvo.nome} ({salvo.sku})", autor)
        else:
            self._auditar('CREATE', salvo.id, f"Product Created: {salvo.nome} ({salvo.sku})", autor)
        return salvo

    def ajustar_estoque(self, produto_id: str, delta: int, autor: str = AUTOR_SISTEMA) -> None:
        """Aplica max(0, estoque + delta). Produto inexistente é ignorado silenciosamente."""
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise DadosInvalidosError("O ajuste de estoque deve ser um número inteiro.")
        if delta == 0:
            return

        resultado = self.produto_repo.ajustar_estoque(produto_id, delta)
        if resultado is None:
            logger.info("Ajuste de estoque ignorado: produto %s não encontrado.", produto_id)
            return

        anterior, novo = resultado
        if anterior != novo:
            self._auditar(
                'STOCK_ADJUST', produto_id,
                f"Stock adjusted by {delta} (From {anterior} to {novo})", autor
            )

    def deletar(self, produto_id: str, politica: PoliticaExclusao = PoliticaExclusao.ARQUIVAR,
                autor: str = AUTOR_SISTEMA) -> None:
        politica = PoliticaExclusao(politica)
        if politica == PoliticaExclusao.REMOVER:
            if not self.produto_repo.remover(produto_id):
                raise ProdutoNaoEncontradoError(produto_id)
            self._auditar('DELETE', produto_id, "Product permanently deleted (Hard Delete)", autor)
        else:
            if not self.produto_repo.arquivar(produto_id):
                raise ProdutoNaoEncontradoError(produto_id)
            self._auditar('ARCHIVE', produto_id, "Product archived (Soft Delete)", autor)

    def exportar_csv(self, filtros: Optional[FiltrosCatalogo] = None) -> str:
        return exportar_csv(self.listar(filtros))

    def _validar(self, produto: Produto):
        if not (produto.sku or '').strip():
            raise DadosInvalidosError("O SKU é obrigatório.")
        if not (produto.nome or '').strip():
            raise DadosInvalidosError("O nome do produto é obrigatório.")
        if produto.preco is None or Decimal(produto.preco) < 0:
            raise DadosInvalidosError(f"Preço inválido para o SKU '{produto.sku}': deve ser maior ou igual a zero.")
        if produto.estoque is None or int(produto.estoque) < 0:
            raise DadosInvalidosError(f"Estoque inválido para o SKU '{produto.sku}': deve ser maior ou igual a zero.")

    def _auditar(self, acao: str, alvo_id: str, mensagem: str, autor: str):
        self.auditoria_repo.registrar(RegistroAuditoria(acao=acao, alvo_id=alvo_id, mensagem=mensagem, autor=autor))


# ====================================================================
# 2. CASOS DE USO DO CARRINHO
# ====================================================================

class GerenciarCarrinhoUseCase:
    """
    Caso de Uso que centraliza a lógica de gestão do carrinho (adicionar, remover, visualizar).
    O preço é congelado no momento em que o item entra no carrinho.
    """
    def __init__(self, carrinho_repo: ICarrinhoRepository, produto_repo: IProdutoRepository):
        self.carrinho_repo = carrinho_repo
        self.produto_repo = produto_repo

    def obter_carrinho(self, chave: str) -> Carrinho:
        if not chave:
            raise DadosInvalidosError("É necessária uma chave de sessão para o carrinho.")
        return self.carrinho_repo.buscar(chave)

    def adicionar_item(self, chave: str, produto_id: str, quantidade: int = 1) -> Carrinho:
        if quantidade <= 0:
            raise DadosInvalidosError("A quantidade a adicionar deve ser positiva.")

        produto = self.produto_repo.buscar_por_id(produto_id)
        if not produto or produto.status != StatusProduto.ATIVO:
            raise ProdutoNaoEncontradoError(produto_id)
        if produto.estoque < quantidade:
            raise EstoqueInsuficienteError(
                produto_id=produto.id, estoque_atual=produto.estoque, quantidade_solicitada=quantidade,
                message=(f"Estoque insuficiente para '{produto.nome}' ({produto.sku}). "
                         f"Disponível: {produto.estoque}, Solicitado: {quantidade}.")
            )

        item = ItemCarrinho(
            produto_id=produto.id,
            nome=produto.nome,
            preco_unitario=produto.preco,
            quantidade=quantidade,
        )
        return self.carrinho_repo.adicionar_item(chave, item)

    def remover_item(self, chave: str, id_linha: str) -> Carrinho:
        carrinho = self.carrinho_repo.buscar(chave)
        if not any(item.id_linha == id_linha for item in carrinho.itens):
            raise ItemNaoEncontradoError("Item não encontrado no carrinho.")
        return self.carrinho_repo.remover_item(chave, id_linha)

    def limpar(self, chave: str) -> None:
        self.carrinho_repo.limpar(chave)


# ====================================================================
# 3. CASOS DE USO DE PEDIDO E CHECKOUT
# ====================================================================

class CriarPedidoUseCase:
    """
    Motor de Pedidos: valida todas as linhas contra o catálogo e só então grava
    o pedido junto com a baixa de estoque, numa única operação atômica do repositório.
    Os valores do pedido são os do ResumoPrecos recebido, sem recálculo.
    """
    def __init__(self, produto_repo: IProdutoRepository, pedido_repo: IPedidoRepository,
                 auditoria_repo: IAuditoriaRepository):
        self.produto_repo = produto_repo
        self.pedido_repo = pedido_repo
        self.auditoria_repo = auditoria_repo

    def executar(self, carrinho: Carrinho, dados_cliente: DadosCliente, precos: ResumoPrecos,
                 codigo_cupom: Optional[str] = None) -> Pedido:
        if not carrinho.itens:
            raise CarrinhoVazioError("Não é possível finalizar o checkout com o carrinho vazio.")

        # 1. Checagem de existência e estoque para todas as linhas antes de gravar qualquer coisa
        quantidades = carrinho.quantidades_por_produto()
        for produto_id, quantidade in quantidades.items():
            produto = self.produto_repo.buscar_por_id(produto_id)
            if not produto:
                raise ProdutoNaoEncontradoError(produto_id)
            if produto.estoque < quantidade:
                raise EstoqueInsuficienteError(
                    produto_id=produto.id, estoque_atual=produto.estoque, quantidade_solicitada=quantidade,
                    message=(f"Estoque insuficiente para '{produto.nome}' ({produto.sku}). "
                             f"Disponível: {produto.estoque}, Solicitado: {quantidade}.")
                )

        # 2. Snapshot imutável das linhas, com o preço congelado no carrinho
        itens = [
            ItemPedido(
                produto_id=item.produto_id,
                nome=item.nome,
                quantidade=item.quantidade,
                preco_unitario=item.preco_unitario,
            )
            for item in carrinho.itens
        ]

        pedido = Pedido(
            id=gerar_id_pedido(),
            nome_cliente=dados_cliente.nome or 'Anonymous',
            email_cliente=(dados_cliente.email or '').strip().lower(),
            itens=itens,
            subtotal=precos.subtotal,
            imposto=precos.imposto,
            desconto=precos.desconto,
            frete=precos.frete,
            total=precos.total,
            status=StatusPedido.PAGO,
            forma_pagamento=dados_cliente.forma_pagamento,
            endereco_entrega=dados_cliente.endereco_entrega,
            codigo_rastreio=gerar_codigo_rastreio(),
            codigo_cupom=codigo_cupom,
            data_pedido=agora(),
        )

        # 3. Baixa condicional de estoque + gravação do pedido (tudo ou nada)
        pedido_final = self.pedido_repo.criar_pedido(pedido, quantidades)

        logger.info("Pedido %s criado para %s (total %s).", pedido_final.id, pedido_final.email_cliente, pedido_final.total)
        self.auditoria_repo.registrar(RegistroAuditoria(
            acao='ORDER_PLACED',
            alvo_id=pedido_final.id,
            mensagem=f"Order placed with {len(itens)} line(s), total {pedido_final.total}",
            autor=pedido_final.email_cliente or AUTOR_SISTEMA,
        ))
        return pedido_final


class FinalizarCheckoutUseCase:
    """
    Coordena o checkout completo: carrinho -> cupom -> preços -> pedido ->
    limpeza do carrinho -> uso do cupom -> valor acumulado do cliente.

    `unidade_de_trabalho` envolve a sequência inteira (na variante servidor,
    `transaction.atomic`). O carrinho é esvaziado logo após o pedido para que
    uma nova tentativa não duplique a compra.
    """
    def __init__(
        self,
        carrinho_repo: ICarrinhoRepository,
        cupom_repo: ICupomRepository,
        cliente_repo: IClienteRepository,
        criar_pedido: CriarPedidoUseCase,
        taxa_imposto: Decimal,
        metodos_envio: Dict[str, Decimal],
        unidade_de_trabalho: Callable[[], ContextManager] = nullcontext,
    ):
        self.carrinho_repo = carrinho_repo
        self.cupom_repo = cupom_repo
        self.cliente_repo = cliente_repo
        self.criar_pedido = criar_pedido
        self.taxa_imposto = taxa_imposto
        self.metodos_envio = metodos_envio
        self.unidade_de_trabalho = unidade_de_trabalho

    def cotar(self, chave: str, codigo_cupom: Optional[str] = None,
              metodo_envio: Optional[str] = None) -> Tuple[ResumoPrecos, Optional[Cupom]]:
        carrinho = self.carrinho_repo.buscar(chave)
        return self._precificar(carrinho, codigo_cupom, metodo_envio)

    def executar(self, chave: str, dados_cliente: DadosCliente, codigo_cupom: Optional[str] = None,
                 metodo_envio: Optional[str] = None) -> Pedido:
        carrinho = self.carrinho_repo.buscar(chave)
        if not carrinho.itens:
            raise CarrinhoVazioError("Não é possível finalizar o checkout com o carrinho vazio.")

        cliente = self.cliente_repo.buscar_por_email(dados_cliente.email) if dados_cliente.email else None
        if cliente and cliente.status == StatusCliente.BLOQUEADO:
            raise DadosInvalidosError("Esta conta de cliente está bloqueada para novas compras.")

        precos, cupom = self._precificar(carrinho, codigo_cupom, metodo_envio)
        with self.unidade_de_trabalho():
            pedido = self.criar_pedido.executar(
                carrinho, dados_cliente, precos, codigo_cupom=cupom.codigo if cupom else None
            )
            self.carrinho_repo.limpar(chave)

            if cupom:
                self.cupom_repo.registrar_uso(cupom.id)
            self.cliente_repo.registrar_compra(pedido.email_cliente, pedido.total)
        return pedido

    def _precificar(self, carrinho: Carrinho, codigo_cupom: Optional[str],
                    metodo_envio: Optional[str]) -> Tuple[ResumoPrecos, Optional[Cupom]]:
        cupom = None
        if codigo_cupom and codigo_cupom.strip():
            cupom = GerenciarCuponsUseCase(self.cupom_repo).buscar_aplicavel(codigo_cupom)
            if cupom is None:
                raise DadosInvalidosError(f"Cupom inválido ou expirado: '{codigo_cupom.strip().upper()}'.")

        metodo = metodo_envio or next(iter(self.metodos_envio))
        if metodo not in self.metodos_envio:
            raise DadosInvalidosError(f"Método de envio desconhecido: '{metodo}'.")

        precos = calcular_precos(carrinho.itens, cupom, self.metodos_envio[metodo], self.taxa_imposto)
        return precos, cupom


# ====================================================================
# 4. CASOS DE USO ADMINISTRATIVOS DE PEDIDOS
# ====================================================================

# Máquina de estados dos pedidos. Estados terminais não têm saída.
TRANSICOES_PEDIDO: Dict[StatusPedido, frozenset] = {
    StatusPedido.PENDENTE: frozenset({StatusPedido.PAGO, StatusPedido.CANCELADO, StatusPedido.REEMBOLSADO}),
    StatusPedido.PAGO: frozenset({StatusPedido.ENVIADO, StatusPedido.REEMBOLSADO}),
    StatusPedido.ENVIADO: frozenset({StatusPedido.ENTREGUE, StatusPedido.REEMBOLSADO}),
    StatusPedido.ENTREGUE: frozenset({StatusPedido.DEVOLUCAO_SOLICITADA}),
    StatusPedido.DEVOLUCAO_SOLICITADA: frozenset({StatusPedido.REEMBOLSADO}),
    StatusPedido.CANCELADO: frozenset(),
    StatusPedido.REEMBOLSADO: frozenset(),
}


class GerenciarPedidosAdminUseCase:
    """Caso de Uso para listagem e atualização de pedidos (acesso administrativo)."""

    def __init__(self, pedido_repo: IPedidoRepository, auditoria_repo: IAuditoriaRepository,
                 transicoes_estritas: bool = True):
        self.pedido_repo = pedido_repo
        self.auditoria_repo = auditoria_repo
        self.transicoes_estritas = transicoes_estritas

    def listar_todos(self, status: Optional[str] = None) -> List[Pedido]:
        """Lista todos os pedidos, do mais recente para o mais antigo."""
        return self.pedido_repo.listar(_status_pedido(status) if status else None)

    def detalhar_pedido(self, pedido_id: str) -> Pedido:
        pedido = self.pedido_repo.buscar_por_id(pedido_id)
        if not pedido:
            raise PedidoNaoEncontradoError(f"Pedido {pedido_id} não encontrado.")
        return pedido

    def transicao_permitida(self, atual: StatusPedido, novo: StatusPedido) -> bool:
        if not self.transicoes_estritas:
            return True
        return novo in TRANSICOES_PEDIDO[atual]

    def atualizar_status(self, pedido_id: str, novo_status, autor: str = AUTOR_SISTEMA) -> Optional[Pedido]:
        """
        Aplica uma transição de status. Pedido desconhecido é ignorado (retorna None).
        """
        novo = _status_pedido(novo_status)
        pedido = self.pedido_repo.buscar_por_id(pedido_id)
        if not pedido:
            logger.info("Atualização de status ignorada: pedido %s não encontrado.", pedido_id)
            return None
        if pedido.status == novo:
            return pedido

        if not self.transicao_permitida(pedido.status, novo):
            raise StatusInvalidoError(
                f"Transição inválida para o pedido {pedido_id}: {pedido.status.value} -> {novo.value}."
            )

        esperado = pedido.status if self.transicoes_estritas else None
        if not self.pedido_repo.atualizar_status(pedido_id, novo, status_esperado=esperado):
            raise StatusInvalidoError(
                f"O status do pedido {pedido_id} foi alterado por outra operação. Recarregue e tente novamente."
            )

        self.auditoria_repo.registrar(RegistroAuditoria(
            acao='ORDER_STATUS',
            alvo_id=pedido_id,
            mensagem=f"Status changed from {pedido.status.value} to {novo.value}",
            autor=autor,
        ))
        pedido.status = novo
        return pedido

    def solicitar_devolucao(self, pedido_id: str, autor: str = AUTOR_SISTEMA) -> Optional[Pedido]:
        return self.atualizar_status(pedido_id, StatusPedido.DEVOLUCAO_SOLICITADA, autor)

    def atualizar_rastreio(self, pedido_id: str, codigo_rastreio: str) -> None:
        if not (codigo_rastreio or '').strip():
            raise DadosInvalidosError("O código de rastreio não pode ser vazio.")
        if not self.pedido_repo.atualizar_rastreio(pedido_id, codigo_rastreio.strip()):
            logger.info("Atualização de rastreio ignorada: pedido %s não encontrado.", pedido_id)

    def gerar_fatura(self, pedido_id: str) -> str:
        return gerar_fatura_texto(self.detalhar_pedido(pedido_id))


# ====================================================================
# 5. CUPONS
# ====================================================================

class GerenciarCuponsUseCase:
    """Livro de cupons: busca do cupom aplicável e manutenção pelo painel de marketing."""

    def __init__(self, cupom_repo: ICupomRepository, auditoria_repo: Optional[IAuditoriaRepository] = None):
        self.cupom_repo = cupom_repo
        self.auditoria_repo = auditoria_repo

    def buscar_aplicavel(self, codigo: str) -> Optional[Cupom]:
        """Retorna o cupom ativo com o código (sem diferenciar maiúsculas) ou None."""
        codigo = (codigo or '').strip().upper()
        if not codigo:
            return None
        cupom = self.cupom_repo.buscar_por_codigo(codigo)
        if cupom and cupom.status == StatusCupom.ATIVO:
            return cupom
        return None

    def listar(self) -> List[Cupom]:
        return self.cupom_repo.listar()

    def salvar(self, cupom: Cupom, autor: str = AUTOR_SISTEMA) -> Cupom:
        cupom.codigo = (cupom.codigo or '').strip().upper()
        if not cupom.codigo:
            raise DadosInvalidosError("O código do cupom é obrigatório.")
        if Decimal(cupom.valor) < 0:
            raise DadosInvalidosError(f"O valor do cupom '{cupom.codigo}' não pode ser negativo.")
        if cupom.tipo_desconto == TipoDesconto.PERCENTUAL and Decimal(cupom.valor) > 100:
            raise DadosInvalidosError(f"O cupom percentual '{cupom.codigo}' não pode passar de 100%.")

        novo = cupom.id is None
        salvo = self.cupom_repo.salvar(cupom)
        if novo and self.auditoria_repo:
            self.auditoria_repo.registrar(RegistroAuditoria(
                acao='COUPON_CREATE', alvo_id=salvo.id, mensagem=f"Coupon {salvo.codigo} created", autor=autor
            ))
        return salvo

    def deletar(self, cupom_id: str, autor: str = AUTOR_SISTEMA) -> None:
        self.cupom_repo.deletar(cupom_id)
        if self.auditoria_repo:
            self.auditoria_repo.registrar(RegistroAuditoria(
                acao='COUPON_DELETE', alvo_id=cupom_id, mensagem="Coupon deleted", autor=autor
            ))


# ====================================================================
# 6. CLIENTES
# ====================================================================

class GerenciarClientesUseCase:
    """
    Cadastro, autenticação e perfil do cliente. As funções de hash são injetadas
    para manter o Core independente do framework.
    """
    def __init__(self, cliente_repo: IClienteRepository, produto_repo: IProdutoRepository,
                 gerar_hash: Callable[[str], str], verificar_hash: Callable[[str, str], bool]):
        self.cliente_repo = cliente_repo
        self.produto_repo = produto_repo
        self.gerar_hash = gerar_hash
        self.verificar_hash = verificar_hash

    @staticmethod
    def normalizar_email(email: str) -> str:
        return (email or '').strip().lower()

    def registrar(self, nome: str, email: str, senha: str) -> Cliente:
        email = self.normalizar_email(email)
        if not email or '@' not in email:
            raise DadosInvalidosError("Informe um e-mail válido.")
        if not senha:
            raise DadosInvalidosError("A senha é obrigatória.")
        if self.cliente_repo.buscar_por_email(email):
            raise DadosInvalidosError(f"O e-mail '{email}' já está cadastrado.")

        cliente = Cliente(
            nome=(nome or '').strip() or 'Resident',
            email=email,
            senha_hash=self.gerar_hash(senha),
            data_cadastro=date.today().isoformat(),
        )
        return self.cliente_repo.salvar(cliente)

    def autenticar(self, email: str, senha: str) -> Optional[Cliente]:
        cliente = self.cliente_repo.buscar_por_email(self.normalizar_email(email))
        if not cliente or cliente.status == StatusCliente.BLOQUEADO:
            return None
        if not cliente.senha_hash or not self.verificar_hash(senha, cliente.senha_hash):
            return None
        return cliente

    def listar(self) -> List[Cliente]:
        return self.cliente_repo.listar()

    def detalhar(self, cliente_id: str) -> Cliente:
        cliente = self.cliente_repo.buscar_por_id(cliente_id)
        if not cliente:
            raise ClienteNaoEncontradoError(f"Cliente {cliente_id} não encontrado.")
        return cliente

    def atualizar_status(self, cliente_id: str, status) -> Optional[Cliente]:
        try:
            status = StatusCliente(status)
        except ValueError:
            raise DadosInvalidosError(f"Status de cliente inválido: '{status}'.")
        cliente = self.cliente_repo.buscar_por_id(cliente_id)
        if not cliente:
            return None
        cliente.status = status
        return self.cliente_repo.salvar(cliente)

    def alternar_desejo(self, cliente_id: str, produto_id: str) -> List[str]:
        """Adiciona o produto à lista de desejos ou o remove, se já estiver nela."""
        if not self.produto_repo.buscar_por_id(produto_id):
            raise ProdutoNaoEncontradoError(produto_id)
        lista = self.cliente_repo.alternar_desejo(cliente_id, produto_id)
        if lista is None:
            raise ClienteNaoEncontradoError(f"Cliente {cliente_id} não encontrado.")
        return lista

    def adicionar_endereco(self, cliente_id: str, endereco: Endereco) -> Cliente:
        if not endereco.rua or not endereco.cidade:
            raise DadosInvalidosError("Rua e cidade são obrigatórias no endereço.")
        cliente = self.detalhar(cliente_id)
        cliente.enderecos.append(endereco)
        return self.cliente_repo.salvar(cliente)


# ====================================================================
# 7. SUPORTE E AUDITORIA
# ====================================================================

class GerenciarChamadosUseCase:
    """Central de suporte: abertura, respostas, notas internas e status dos chamados."""

    def __init__(self, chamado_repo: IChamadoRepository):
        self.chamado_repo = chamado_repo

    def abrir(self, cliente_id: str, nome_cliente: str, assunto: str, mensagem: str,
              pedido_id: Optional[str] = None, prioridade=PrioridadeChamado.MEDIA) -> Chamado:
        if not (mensagem or '').strip():
            raise DadosInvalidosError("A mensagem do chamado não pode ser vazia.")
        try:
            prioridade = PrioridadeChamado(prioridade)
        except ValueError:
            raise DadosInvalidosError(f"Prioridade inválida: '{prioridade}'.")

        chamado = Chamado(
            id=f"TKT-{gerar_id()[:8].upper()}",
            cliente_id=cliente_id or 'anon',
            nome_cliente=nome_cliente or 'Anonymous',
            assunto=assunto or 'General Inquiry',
            mensagem=mensagem.strip(),
            pedido_id=pedido_id,
            prioridade=prioridade,
        )
        return self.chamado_repo.salvar(chamado)

    def listar(self, status: Optional[str] = None) -> List[Chamado]:
        if status:
            try:
                status = StatusChamado(status)
            except ValueError:
                raise DadosInvalidosError(f"Status de chamado inválido: '{status}'.")
        return self.chamado_repo.listar(status)

    def detalhar(self, chamado_id: str) -> Chamado:
        chamado = self.chamado_repo.buscar_por_id(chamado_id)
        if not chamado:
            raise ChamadoNaoEncontradoError(f"Chamado {chamado_id} não encontrado.")
        return chamado

    def responder(self, chamado_id: str, autor: str, mensagem: str, admin: bool = False) -> Chamado:
        if not (mensagem or '').strip():
            raise DadosInvalidosError("A resposta não pode ser vazia.")
        chamado = self.detalhar(chamado_id)
        chamado.respostas.append(RespostaChamado(autor=autor, mensagem=mensagem.strip(), admin=admin))
        return self._tocar(chamado)

    def adicionar_nota(self, chamado_id: str, nota: str) -> Chamado:
        chamado = self.detalhar(chamado_id)
        chamado.notas_internas.append(f"{agora().isoformat(timespec='seconds')}: {nota.strip()}")
        return self._tocar(chamado)

    def atualizar_status(self, chamado_id: str, status) -> Chamado:
        try:
            status = StatusChamado(status)
        except ValueError:
            raise DadosInvalidosError(f"Status de chamado inválido: '{status}'.")
        chamado = self.detalhar(chamado_id)
        chamado.status = status
        return self._tocar(chamado)

    def _tocar(self, chamado: Chamado) -> Chamado:
        chamado.data_atualizacao = agora()
        return self.chamado_repo.salvar(chamado)


class ConsultarAuditoriaUseCase:
    def __init__(self, auditoria_repo: IAuditoriaRepository):
        self.auditoria_repo = auditoria_repo

    def executar(self, alvo_id: Optional[str] = None) -> List[RegistroAuditoria]:
        return self.auditoria_repo.listar(alvo_id)


# ====================================================================
# 8. PAINEL E CONTEÚDO GERADO POR IA
# ====================================================================

class EstatisticasPainelUseCase:
    """Indicadores do painel administrativo."""

    STATUS_FORA_DA_RECEITA = {StatusPedido.CANCELADO, StatusPedido.REEMBOLSADO}

    def __init__(self, pedido_repo: IPedidoRepository, produto_repo: IProdutoRepository):
        self.pedido_repo = pedido_repo
        self.produto_repo = produto_repo

    def executar(self) -> Dict[str, object]:
        pedidos = self.pedido_repo.listar()
        receita = sum(
            (p.total for p in pedidos if p.status not in self.STATUS_FORA_DA_RECEITA),
            Decimal('0.00')
        )
        estoque_baixo = self.produto_repo.listar(FiltrosCatalogo(nivel_estoque='Low'))
        return {
            'receita_total': receita,
            'total_pedidos': len(pedidos),
            'envios_pendentes': sum(1 for p in pedidos if p.status == StatusPedido.PAGO),
            'itens_estoque_baixo': len(estoque_baixo),
            'limite_estoque_baixo': LIMITE_ESTOQUE_BAIXO,
        }


def chave_cache(*partes) -> str:
    """Chave determinística derivada das entradas semânticas do texto."""
    bruto = '|'.join(str(p) for p in partes)
    return 'ia:' + hashlib.sha256(bruto.encode('utf-8')).hexdigest()


class GerarConteudoIAUseCase:
    """Textos de marketing e análise gerados pelo serviço externo, com cache e fallback."""

    def __init__(self, gerador_texto: IGeradorTexto):
        self.gerador_texto = gerador_texto

    def descricao_produto(self, produto: Produto) -> str:
        prompt = (
            f'Write a premium, editorial-style product description for a designer fashion item: '
            f'"{produto.nome}" ({produto.categoria}). Tone: Sophisticated, Minimalist, Seoul-Aesthetic. '
            f'Include 2-3 brief quality highlights. Under 50 words.'
        )
        return self.gerador_texto.gerar(
            chave_cache('descricao', produto.nome, produto.categoria),
            prompt,
            fallback="Refined silhouettes meet artisanal craftsmanship. "
                     "A cornerstone for the contemporary Seoul wardrobe.",
        )

    def insight_painel(self, estatisticas: Dict[str, object]) -> str:
        prompt = (
            f"Sales: ${estatisticas['receita_total']}, Orders: {estatisticas['total_pedidos']}.\n"
            f"Analyze performance and predict the next \"premium\" K-fashion trend. "
            f"Provide 3 sophisticated, data-driven bullet points. Keep it professional and luxury-toned."
        )
        return self.gerador_texto.gerar(
            chave_cache('insight', estatisticas['receita_total'], estatisticas['total_pedidos']),
            prompt,
            fallback="Analyzing market shift in the Seongsu-dong district...",
            instrucao_sistema="Act as a senior high-fashion trend forecaster for a luxury boutique in Seoul.",
        )
