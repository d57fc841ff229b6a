"""
Variante local de persistência: cada coleção (produtos, pedidos, cupons, ...) é
uma lista de registros serializada em JSON e gravada inteira sob a chave
`seoul_muse:<colecao>:v2` de um armazenamento chave-valor.

Todos os repositórios desta variante compartilham o mesmo RLock de escrita
(ColecoesLocais.lock), o que torna cada ciclo ler-verificar-gravar atômico
dentro do processo.
"""
import json
import logging
import threading
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple

from django.core.cache import caches
from django.core.serializers.json import DjangoJSONEncoder

from seoulmuse.core.catalogo import consultar_catalogo
from seoulmuse.core.entities import (
    Carrinho, Chamado, Cliente, Cupom, FiltrosCatalogo, ItemCarrinho, Pedido, Produto,
    RegistroAuditoria, StatusChamado, StatusPedido, StatusProduto, agora, gerar_id, normalizar_sku,
)
from seoulmuse.core.exceptions import (
    DadosInvalidosError,
    EstoqueInsuficienteError,
    PersistenciaError,
    ProdutoNaoEncontradoError,
    SkuDuplicadoError,
)
from seoulmuse.core.ports import (
    IArmazenamento,
    IAuditoriaRepository,
    ICarrinhoRepository,
    IChamadoRepository,
    IClienteRepository,
    ICupomRepository,
    IPedidoRepository,
    IProdutoRepository,
)

from . import seeds
from .mappers import (
    ChamadoMapper, ClienteMapper, CupomMapper, ItemCarrinhoMapper, PedidoMapper, ProdutoMapper,
    RegistroAuditoriaMapper,
)

logger = logging.getLogger(__name__)

FORMATO_CHAVE = 'seoul_muse:{}:v2'

SEMENTES: Dict[str, Callable[[], list]] = {
    'produtos': lambda: [ProdutoMapper.to_dict(p) for p in seeds.produtos_iniciais()],
    'pedidos': lambda: [PedidoMapper.to_dict(p) for p in seeds.pedidos_iniciais()],
    'cupons': lambda: [CupomMapper.to_dict(c) for c in seeds.cupons_iniciais()],
    'clientes': lambda: [ClienteMapper.to_dict(c) for c in seeds.clientes_iniciais()],
}


# ====================================================================
# 1. ARMAZENAMENTOS CHAVE-VALOR
# ====================================================================

class ArmazenamentoMemoria(IArmazenamento):
    """Armazenamento em dicionário, usado nos testes e em execuções efêmeras."""

    def __init__(self, dados: Optional[Dict[str, str]] = None):
        self.dados: Dict[str, str] = dict(dados or {})

    def get(self, chave: str) -> Optional[str]:
        return self.dados.get(chave)

    def put(self, chave: str, valor: str) -> None:
        self.dados[chave] = valor


class ArmazenamentoCache(IArmazenamento):
    """Armazenamento sobre um backend de cache do Django, sem expiração."""

    def __init__(self, alias: str = 'default'):
        self.alias = alias

    @property
    def cache(self):
        return caches[self.alias]

    def get(self, chave: str) -> Optional[str]:
        try:
            return self.cache.get(chave)
        except Exception as e:
            logger.error("Falha ao ler '%s' do cache '%s': %s", chave, self.alias, e)
            raise PersistenciaError(f"Falha ao ler a coleção '{chave}'.")

    def put(self, chave: str, valor: str) -> None:
        try:
            self.cache.set(chave, valor, timeout=None)
        except Exception as e:
            logger.error("Falha ao gravar '%s' no cache '%s': %s", chave, self.alias, e)
            raise PersistenciaError(f"Falha ao gravar a coleção '{chave}'.")


# ====================================================================
# 2. COLEÇÕES SERIALIZADAS
# ====================================================================

class ColecoesLocais:
    """
    Leitura e gravação das coleções como snapshots inteiros.

    Uma coleção ausente é semeada uma única vez; uma lista vazia gravada é um
    estado válido e nunca volta a ser semeada.
    """

    def __init__(self, armazenamento: IArmazenamento, semear: bool = True, limite_auditoria: int = 500):
        self.armazenamento = armazenamento
        self.semear = semear
        self.limite_auditoria = limite_auditoria
        self.lock = threading.RLock()

    @staticmethod
    def chave(colecao: str) -> str:
        return FORMATO_CHAVE.format(colecao)

    def ler(self, colecao: str) -> List[dict]:
        with self.lock:
            bruto = self.armazenamento.get(self.chave(colecao))
            if bruto is None:
                registros = SEMENTES[colecao]() if (self.semear and colecao in SEMENTES) else []
                self.gravar(colecao, registros)
                return registros
            try:
                return json.loads(bruto)
            except ValueError as e:
                logger.error("Coleção '%s' corrompida: %s", colecao, e)
                raise PersistenciaError(f"Não foi possível ler a coleção '{colecao}'.")

    def gravar(self, colecao: str, registros: List[dict]) -> None:
        self.gravar_varias({colecao: registros})

    def gravar_varias(self, alteracoes: Dict[str, List[dict]]) -> None:
        """
        Serializa todas as coleções antes de gravar qualquer uma. Se uma gravação
        falhar, as coleções já gravadas voltam ao conteúdo anterior.
        """
        with self.lock:
            serializadas = {}
            for colecao, registros in alteracoes.items():
                try:
                    serializadas[colecao] = json.dumps(registros, cls=DjangoJSONEncoder)
                except (TypeError, ValueError) as e:
                    logger.error("Falha ao serializar a coleção '%s': %s", colecao, e)
                    raise PersistenciaError(f"Não foi possível serializar a coleção '{colecao}'.")

            anteriores = {colecao: self.armazenamento.get(self.chave(colecao)) for colecao in serializadas}
            gravadas = []
            try:
                for colecao, bruto in serializadas.items():
                    self.armazenamento.put(self.chave(colecao), bruto)
                    gravadas.append(colecao)
            except PersistenciaError:
                for colecao in gravadas:
                    if anteriores[colecao] is not None:
                        self.armazenamento.put(self.chave(colecao), anteriores[colecao])
                raise


def _indice(registros: List[dict], campo: str, valor) -> Optional[int]:
    for i, registro in enumerate(registros):
        if registro.get(campo) == valor:
            return i
    return None


# ====================================================================
# 3. REPOSITÓRIOS DA VARIANTE LOCAL
# ====================================================================

class ProdutoRepositoryLocal(IProdutoRepository):

    def __init__(self, colecoes: ColecoesLocais):
        self.colecoes = colecoes

    def _todos(self) -> List[Produto]:
        return [ProdutoMapper.from_dict(r) for r in self.colecoes.ler('produtos')]

    def buscar_por_id(self, produto_id: str) -> Optional[Produto]:
        return next((p for p in self._todos() if p.id == produto_id), None)

    def listar(self, filtros: FiltrosCatalogo) -> List[Produto]:
        return consultar_catalogo(self._todos(), filtros)

    def salvar(self, produto: Produto) -> Produto:
        with self.colecoes.lock:
            registros = self.colecoes.ler('produtos')
            sku = produto.sku_normalizado
            for registro in registros:
                if registro['id'] != produto.id and normalizar_sku(registro['sku']) == sku:
                    raise SkuDuplicadoError(registro['sku'], produto_id=registro['id'])

            posicao = _indice(registros, 'id', produto.id) if produto.id else None
            instante = agora()
            if posicao is None:
                produto = replace(
                    produto,
                    id=produto.id or gerar_id('prod-'),
                    data_criacao=produto.data_criacao or instante,
                )
                registros.insert(0, ProdutoMapper.to_dict(produto))
            else:
                anterior = ProdutoMapper.from_dict(registros[posicao])
                # Estoque só muda por ajustar_estoque ou pela baixa do pedido
                produto = replace(
                    produto,
                    estoque=anterior.estoque,
                    data_criacao=anterior.data_criacao,
                    data_atualizacao=instante,
                )
                registros[posicao] = ProdutoMapper.to_dict(produto)

            self.colecoes.gravar('produtos', registros)
            return self.buscar_por_id(produto.id)

    def ajustar_estoque(self, produto_id: str, delta: int) -> Optional[Tuple[int, int]]:
        with self.colecoes.lock:
            registros = self.colecoes.ler('produtos')
            posicao = _indice(registros, 'id', produto_id)
            if posicao is None:
                return None

            anterior = int(registros[posicao]['estoque'])
            novo = max(0, anterior + delta)
            if novo != anterior:
                registros[posicao]['estoque'] = novo
                registros[posicao]['data_atualizacao'] = agora()
                self.colecoes.gravar('produtos', registros)
            return anterior, novo

    def arquivar(self, produto_id: str) -> bool:
        with self.colecoes.lock:
            registros = self.colecoes.ler('produtos')
            posicao = _indice(registros, 'id', produto_id)
            if posicao is None:
                return False
            registros[posicao]['status'] = StatusProduto.ARQUIVADO.value
            registros[posicao]['data_atualizacao'] = agora()
            self.colecoes.gravar('produtos', registros)
            return True

    def remover(self, produto_id: str) -> bool:
        """Remoção física: também limpa o produto de todos os carrinhos e listas de desejos."""
        with self.colecoes.lock:
            produtos = self.colecoes.ler('produtos')
            restantes = [r for r in produtos if r['id'] != produto_id]
            if len(restantes) == len(produtos):
                return False

            carrinhos = self.colecoes.ler('carrinhos')
            for carrinho in carrinhos:
                carrinho['itens'] = [i for i in carrinho['itens'] if i['produto_id'] != produto_id]

            clientes = self.colecoes.ler('clientes')
            for cliente in clientes:
                cliente['lista_desejos'] = [p for p in cliente.get('lista_desejos', []) if p != produto_id]

            self.colecoes.gravar_varias({'produtos': restantes, 'carrinhos': carrinhos, 'clientes': clientes})
            return True


class PedidoRepositoryLocal(IPedidoRepository):

    def __init__(self, colecoes: ColecoesLocais):
        self.colecoes = colecoes

    def criar_pedido(self, pedido: Pedido, baixas_estoque: Dict[str, int]) -> Pedido:
        """Verifica e baixa o estoque e grava o pedido sob o lock de escrita."""
        with self.colecoes.lock:
            produtos = self.colecoes.ler('produtos')
            posicoes = {r['id']: i for i, r in enumerate(produtos)}

            for produto_id, quantidade in baixas_estoque.items():
                if produto_id not in posicoes:
                    raise ProdutoNaoEncontradoError(produto_id)
                atual = int(produtos[posicoes[produto_id]]['estoque'])
                if atual < quantidade:
                    raise EstoqueInsuficienteError(
                        produto_id=produto_id, estoque_atual=atual, quantidade_solicitada=quantidade
                    )

            for produto_id, quantidade in baixas_estoque.items():
                produtos[posicoes[produto_id]]['estoque'] = int(produtos[posicoes[produto_id]]['estoque']) - quantidade

            pedidos = self.colecoes.ler('pedidos')
            pedidos.insert(0, PedidoMapper.to_dict(pedido))
            self.colecoes.gravar_varias({'produtos': produtos, 'pedidos': pedidos})
            return self.buscar_por_id(pedido.id)

    def _todos(self) -> List[Pedido]:
        return [PedidoMapper.from_dict(r) for r in self.colecoes.ler('pedidos')]

    def buscar_por_id(self, pedido_id: str) -> Optional[Pedido]:
        return next((p for p in self._todos() if p.id == pedido_id), None)

    def listar(self, status: Optional[StatusPedido] = None) -> List[Pedido]:
        pedidos = [p for p in self._todos() if status is None or p.status == status]
        pedidos.sort(key=lambda p: p.id)
        return sorted(pedidos, key=lambda p: p.data_pedido, reverse=True)

    def atualizar_status(self, pedido_id: str, novo_status: StatusPedido,
                         status_esperado: Optional[StatusPedido] = None) -> bool:
        with self.colecoes.lock:
            registros = self.colecoes.ler('pedidos')
            posicao = _indice(registros, 'id', pedido_id)
            if posicao is None:
                return False
            if status_esperado is not None and registros[posicao]['status'] != StatusPedido(status_esperado).value:
                return False
            registros[posicao]['status'] = StatusPedido(novo_status).value
            self.colecoes.gravar('pedidos', registros)
            return True

    def atualizar_rastreio(self, pedido_id: str, codigo_rastreio: str) -> bool:
        with self.colecoes.lock:
            registros = self.colecoes.ler('pedidos')
            posicao = _indice(registros, 'id', pedido_id)
            if posicao is None:
                return False
            registros[posicao]['codigo_rastreio'] = codigo_rastreio
            self.colecoes.gravar('pedidos', registros)
            return True


class CupomRepositoryLocal(ICupomRepository):

    def __init__(self, colecoes: ColecoesLocais):
        self.colecoes = colecoes

    def buscar_por_codigo(self, codigo: str) -> Optional[Cupom]:
        codigo = (codigo or '').strip().upper()
        registro = next((r for r in self.colecoes.ler('cupons') if r['codigo'].upper() == codigo), None)
        return CupomMapper.from_dict(registro) if registro else None

    def listar(self) -> List[Cupom]:
        return sorted((CupomMapper.from_dict(r) for r in self.colecoes.ler('cupons')), key=lambda c: c.codigo)

    def salvar(self, cupom: Cupom) -> Cupom:
        with self.colecoes.lock:
            registros = self.colecoes.ler('cupons')
            if any(r['codigo'].upper() == cupom.codigo.upper() and r['id'] != cupom.id for r in registros):
                raise DadosInvalidosError(f"O código de cupom '{cupom.codigo}' já existe.")

            posicao = _indice(registros, 'id', cupom.id) if cupom.id else None
            if posicao is None:
                cupom = replace(cupom, id=cupom.id or gerar_id('cpn-'))
                registros.append(CupomMapper.to_dict(cupom))
            else:
                registros[posicao] = CupomMapper.to_dict(cupom)
            self.colecoes.gravar('cupons', registros)
            return cupom

    def deletar(self, cupom_id: str) -> None:
        with self.colecoes.lock:
            registros = self.colecoes.ler('cupons')
            self.colecoes.gravar('cupons', [r for r in registros if r['id'] != cupom_id])

    def registrar_uso(self, cupom_id: str) -> None:
        with self.colecoes.lock:
            registros = self.colecoes.ler('cupons')
            posicao = _indice(registros, 'id', cupom_id)
            if posicao is not None:
                registros[posicao]['quantidade_usos'] = int(registros[posicao].get('quantidade_usos', 0)) + 1
                self.colecoes.gravar('cupons', registros)


class ClienteRepositoryLocal(IClienteRepository):

    def __init__(self, colecoes: ColecoesLocais):
        self.colecoes = colecoes

    def _todos(self) -> List[Cliente]:
        return [ClienteMapper.from_dict(r) for r in self.colecoes.ler('clientes')]

    def buscar_por_id(self, cliente_id: str) -> Optional[Cliente]:
        return next((c for c in self._todos() if c.id == cliente_id), None)

    def buscar_por_email(self, email: str) -> Optional[Cliente]:
        email = (email or '').strip().lower()
        return next((c for c in self._todos() if c.email == email), None)

    def listar(self) -> List[Cliente]:
        return sorted(self._todos(), key=lambda c: c.id)

    def salvar(self, cliente: Cliente) -> Cliente:
        with self.colecoes.lock:
            registros = self.colecoes.ler('clientes')
            if any(r['email'] == cliente.email and r['id'] != cliente.id for r in registros):
                raise DadosInvalidosError(f"O e-mail '{cliente.email}' já está cadastrado.")

            produtos = {r['id'] for r in self.colecoes.ler('produtos')}
            cliente = replace(cliente, lista_desejos=sorted(p for p in set(cliente.lista_desejos) if p in produtos))

            posicao = _indice(registros, 'id', cliente.id) if cliente.id else None
            if posicao is None:
                cliente = replace(cliente, id=cliente.id or gerar_id('cust-'))
                registros.append(ClienteMapper.to_dict(cliente))
            else:
                registros[posicao] = ClienteMapper.to_dict(cliente)
            self.colecoes.gravar('clientes', registros)
            return self.buscar_por_id(cliente.id)

    def registrar_compra(self, email: str, valor) -> bool:
        email = (email or '').strip().lower()
        with self.colecoes.lock:
            registros = self.colecoes.ler('clientes')
            posicao = _indice(registros, 'email', email)
            if posicao is None:
                return False
            cliente = ClienteMapper.from_dict(registros[posicao])
            cliente.total_pedidos += 1
            cliente.total_gasto += valor
            registros[posicao] = ClienteMapper.to_dict(cliente)
            self.colecoes.gravar('clientes', registros)
            return True

    def alternar_desejo(self, cliente_id: str, produto_id: str) -> Optional[List[str]]:
        with self.colecoes.lock:
            registros = self.colecoes.ler('clientes')
            posicao = _indice(registros, 'id', cliente_id)
            if posicao is None:
                return None
            desejos = set(registros[posicao].get('lista_desejos', []))
            if produto_id in desejos:
                desejos.remove(produto_id)
            else:
                desejos.add(produto_id)
            registros[posicao]['lista_desejos'] = sorted(desejos)
            self.colecoes.gravar('clientes', registros)
            return sorted(desejos)


class CarrinhoRepositoryLocal(ICarrinhoRepository):

    def __init__(self, colecoes: ColecoesLocais):
        self.colecoes = colecoes

    def buscar(self, chave: str) -> Carrinho:
        registro = next((r for r in self.colecoes.ler('carrinhos') if r['chave'] == chave), None)
        itens = [ItemCarrinhoMapper.from_dict(i) for i in registro['itens']] if registro else []
        return Carrinho(chave=chave, itens=itens)

    def _alterar(self, chave: str, funcao) -> Carrinho:
        with self.colecoes.lock:
            registros = self.colecoes.ler('carrinhos')
            posicao = _indice(registros, 'chave', chave)
            if posicao is None:
                registros.append({'chave': chave, 'itens': []})
                posicao = len(registros) - 1
            registros[posicao]['itens'] = funcao(registros[posicao]['itens'])
            if not registros[posicao]['itens']:
                del registros[posicao]
            self.colecoes.gravar('carrinhos', registros)
            return self.buscar(chave)

    def adicionar_item(self, chave: str, item: ItemCarrinho) -> Carrinho:
        return self._alterar(chave, lambda itens: itens + [ItemCarrinhoMapper.to_dict(item)])

    def remover_item(self, chave: str, id_linha: str) -> Carrinho:
        return self._alterar(chave, lambda itens: [i for i in itens if i['id_linha'] != id_linha])

    def limpar(self, chave: str) -> None:
        self._alterar(chave, lambda itens: [])


class AuditoriaRepositoryLocal(IAuditoriaRepository):
    """Mantém somente os registros mais recentes (limite configurável)."""

    def __init__(self, colecoes: ColecoesLocais):
        self.colecoes = colecoes

    def registrar(self, registro: RegistroAuditoria) -> None:
        with self.colecoes.lock:
            registros = self.colecoes.ler('auditoria')
            registros.insert(0, RegistroAuditoriaMapper.to_dict(registro))
            self.colecoes.gravar('auditoria', registros[:self.colecoes.limite_auditoria])

    def listar(self, alvo_id: Optional[str] = None) -> List[RegistroAuditoria]:
        registros = [RegistroAuditoriaMapper.from_dict(r) for r in self.colecoes.ler('auditoria')]
        if alvo_id:
            registros = [r for r in registros if r.alvo_id == alvo_id]
        return registros


class ChamadoRepositoryLocal(IChamadoRepository):

    def __init__(self, colecoes: ColecoesLocais):
        self.colecoes = colecoes

    def _todos(self) -> List[Chamado]:
        return [ChamadoMapper.from_dict(r) for r in self.colecoes.ler('chamados')]

    def buscar_por_id(self, chamado_id: str) -> Optional[Chamado]:
        return next((c for c in self._todos() if c.id == chamado_id), None)

    def listar(self, status: Optional[StatusChamado] = None) -> List[Chamado]:
        chamados = [c for c in self._todos() if status is None or c.status == status]
        chamados.sort(key=lambda c: c.id)
        return sorted(chamados, key=lambda c: c.data_atualizacao, reverse=True)

    def salvar(self, chamado: Chamado) -> Chamado:
        with self.colecoes.lock:
            registros = self.colecoes.ler('chamados')
            if chamado.id is None:
                chamado = replace(chamado, id=f"TKT-{gerar_id()[:8].upper()}")
            posicao = _indice(registros, 'id', chamado.id)
            if posicao is None:
                registros.insert(0, ChamadoMapper.to_dict(chamado))
            else:
                registros[posicao] = ChamadoMapper.to_dict(chamado)
            self.colecoes.gravar('chamados', registros)
            return self.buscar_por_id(chamado.id)
