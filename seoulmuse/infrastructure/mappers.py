"""
Mapeadores (Mappers) para converter entre:
1. Modelos do Django ORM
2. Entidades de Domínio (seoulmuse.core.entities)
3. Registros serializáveis (dict) usados pela variante de armazenamento local
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Type

from django.apps import apps
from django.db import models
from django.utils.dateparse import parse_datetime

from seoulmuse.core.entities import (
    Chamado, Cliente, Cupom, Endereco, ItemCarrinho, ItemPedido, Pedido, PrioridadeChamado, Produto,
    RegistroAuditoria, RespostaChamado, StatusChamado, StatusCliente, StatusCupom, StatusPedido,
    StatusProduto, TipoDesconto,
)


def get_model(app_label: str, model_name: str):
    """Retorna um modelo do Django de forma segura (lazy loading)."""
    return apps.get_model(app_label, model_name)


def _decimal(valor) -> Optional[Decimal]:
    return None if valor is None else Decimal(str(valor))


def _data(valor):
    """Aceita datetime ou texto ISO (como gravado pelo DjangoJSONEncoder)."""
    if valor is None or not isinstance(valor, str):
        return valor
    return parse_datetime(valor)


def _data_iso(valor) -> Optional[str]:
    if valor is None:
        return None
    return valor.isoformat() if isinstance(valor, date) else str(valor)


# ====================================================================
# MAPPERS DO CATÁLOGO
# ====================================================================

class ProdutoMapper:
    """Mapeador para Produto."""

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('catalog', 'Produto')

    @staticmethod
    def to_entity(model: Any) -> Optional[Produto]:
        if not model: return None
        return Produto(
            id=model.id,
            sku=model.sku,
            nome=model.nome,
            preco=model.preco,
            estoque=model.estoque,
            categoria=model.categoria,
            status=StatusProduto(model.status),
            colecao=model.colecao,
            imagem=model.imagem,
            calor_social=model.calor_social,
            avaliacao=model.avaliacao,
            data_criacao=model.data_criacao,
            data_atualizacao=model.data_atualizacao,
        )

    @classmethod
    def to_model(cls, entity: Produto, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(id=entity.id)

        model.sku = entity.sku
        model.nome = entity.nome
        model.preco = entity.preco
        model.estoque = entity.estoque
        model.categoria = entity.categoria
        model.status = StatusProduto(entity.status).value
        model.colecao = entity.colecao
        model.imagem = entity.imagem or ''
        model.calor_social = entity.calor_social
        model.avaliacao = entity.avaliacao
        model.data_criacao = entity.data_criacao
        model.data_atualizacao = entity.data_atualizacao
        return model

    @staticmethod
    def to_dict(entity: Produto) -> Dict[str, Any]:
        return {
            'id': entity.id,
            'sku': entity.sku,
            'nome': entity.nome,
            'preco': entity.preco,
            'estoque': entity.estoque,
            'categoria': entity.categoria,
            'status': StatusProduto(entity.status).value,
            'colecao': entity.colecao,
            'imagem': entity.imagem,
            'calor_social': entity.calor_social,
            'avaliacao': entity.avaliacao,
            'data_criacao': entity.data_criacao,
            'data_atualizacao': entity.data_atualizacao,
        }

    @staticmethod
    def from_dict(dados: Dict[str, Any]) -> Produto:
        return Produto(
            id=dados['id'],
            sku=dados['sku'],
            nome=dados['nome'],
            preco=_decimal(dados['preco']),
            estoque=int(dados['estoque']),
            categoria=dados['categoria'],
            status=StatusProduto(dados['status']),
            colecao=dados.get('colecao'),
            imagem=dados.get('imagem') or '',
            calor_social=dados.get('calor_social'),
            avaliacao=_decimal(dados.get('avaliacao')),
            data_criacao=_data(dados.get('data_criacao')),
            data_atualizacao=_data(dados.get('data_atualizacao')),
        )


# ====================================================================
# MAPPERS DE CARRINHO E PEDIDO
# ====================================================================

class ItemCarrinhoMapper:

    @staticmethod
    def to_entity(model: Any) -> ItemCarrinho:
        return ItemCarrinho(
            id_linha=model.id_linha,
            produto_id=model.produto_id,
            nome=model.nome,
            preco_unitario=model.preco_unitario,
            quantidade=model.quantidade,
        )

    @staticmethod
    def to_dict(entity: ItemCarrinho) -> Dict[str, Any]:
        return {
            'id_linha': entity.id_linha,
            'produto_id': entity.produto_id,
            'nome': entity.nome,
            'preco_unitario': entity.preco_unitario,
            'quantidade': entity.quantidade,
        }

    @staticmethod
    def from_dict(dados: Dict[str, Any]) -> ItemCarrinho:
        return ItemCarrinho(
            id_linha=dados['id_linha'],
            produto_id=dados['produto_id'],
            nome=dados['nome'],
            preco_unitario=_decimal(dados['preco_unitario']),
            quantidade=int(dados['quantidade']),
        )


class PedidoMapper:
    """Mapeador para Pedido e seus itens (snapshot)."""

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('vendas', 'Pedido')

    @staticmethod
    def to_entity(model: Any) -> Optional[Pedido]:
        if not model: return None
        itens = [
            ItemPedido(
                produto_id=item.produto_id,
                nome=item.nome_produto,
                quantidade=item.quantidade,
                preco_unitario=item.preco_unitario,
            )
            for item in model.itens.all()
        ]
        return Pedido(
            id=model.id,
            nome_cliente=model.nome_cliente,
            email_cliente=model.email_cliente,
            itens=itens,
            subtotal=model.subtotal,
            imposto=model.imposto,
            desconto=model.desconto,
            frete=model.frete,
            total=model.total,
            status=StatusPedido(model.status),
            forma_pagamento=model.forma_pagamento,
            endereco_entrega=model.endereco_entrega,
            codigo_rastreio=model.codigo_rastreio,
            codigo_cupom=model.codigo_cupom,
            data_pedido=model.data_pedido,
        )

    @classmethod
    def to_model(cls, entity: Pedido) -> Any:
        return cls.model_class()(
            id=entity.id,
            nome_cliente=entity.nome_cliente,
            email_cliente=entity.email_cliente,
            subtotal=entity.subtotal,
            imposto=entity.imposto,
            desconto=entity.desconto,
            frete=entity.frete,
            total=entity.total,
            status=StatusPedido(entity.status).value,
            forma_pagamento=entity.forma_pagamento,
            endereco_entrega=entity.endereco_entrega,
            codigo_rastreio=entity.codigo_rastreio,
            codigo_cupom=entity.codigo_cupom,
            data_pedido=entity.data_pedido,
        )

    @staticmethod
    def itens_to_models(entity: Pedido, pedido_model: Any) -> list:
        ItemPedidoModel = get_model('vendas', 'ItemPedido')
        return [
            ItemPedidoModel(
                pedido=pedido_model,
                produto_id=item.produto_id,
                nome_produto=item.nome,
                preco_unitario=item.preco_unitario,
                quantidade=item.quantidade,
            )
            for item in entity.itens
        ]

    @staticmethod
    def to_dict(entity: Pedido) -> Dict[str, Any]:
        return {
            'id': entity.id,
            'nome_cliente': entity.nome_cliente,
            'email_cliente': entity.email_cliente,
            'itens': [
                {
                    'produto_id': item.produto_id,
                    'nome': item.nome,
                    'quantidade': item.quantidade,
                    'preco_unitario': item.preco_unitario,
                }
                for item in entity.itens
            ],
            'subtotal': entity.subtotal,
            'imposto': entity.imposto,
            'desconto': entity.desconto,
            'frete': entity.frete,
            'total': entity.total,
            'status': StatusPedido(entity.status).value,
            'forma_pagamento': entity.forma_pagamento,
            'endereco_entrega': entity.endereco_entrega,
            'codigo_rastreio': entity.codigo_rastreio,
            'codigo_cupom': entity.codigo_cupom,
            'data_pedido': entity.data_pedido,
        }

    @staticmethod
    def from_dict(dados: Dict[str, Any]) -> Pedido:
        return Pedido(
            id=dados['id'],
            nome_cliente=dados['nome_cliente'],
            email_cliente=dados['email_cliente'],
            itens=[
                ItemPedido(
                    produto_id=item['produto_id'],
                    nome=item['nome'],
                    quantidade=int(item['quantidade']),
                    preco_unitario=_decimal(item['preco_unitario']),
                )
                for item in dados['itens']
            ],
            subtotal=_decimal(dados['subtotal']),
            imposto=_decimal(dados['imposto']),
            desconto=_decimal(dados['desconto']),
            frete=_decimal(dados['frete']),
            total=_decimal(dados['total']),
            status=StatusPedido(dados['status']),
            forma_pagamento=dados.get('forma_pagamento', 'Credit Card'),
            endereco_entrega=dados.get('endereco_entrega', 'N/A'),
            codigo_rastreio=dados.get('codigo_rastreio'),
            codigo_cupom=dados.get('codigo_cupom'),
            data_pedido=_data(dados['data_pedido']),
        )


# ====================================================================
# MAPPERS DE CUPOM E CLIENTE
# ====================================================================

class CupomMapper:

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('vendas', 'Cupom')

    @staticmethod
    def to_entity(model: Any) -> Optional[Cupom]:
        if not model: return None
        return Cupom(
            id=model.id,
            codigo=model.codigo,
            tipo_desconto=TipoDesconto(model.tipo_desconto),
            valor=model.valor,
            data_expiracao=_data_iso(model.data_expiracao),
            quantidade_usos=model.quantidade_usos,
            status=StatusCupom(model.status),
        )

    @classmethod
    def to_model(cls, entity: Cupom, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(id=entity.id)
        model.codigo = entity.codigo
        model.tipo_desconto = TipoDesconto(entity.tipo_desconto).value
        model.valor = entity.valor
        model.data_expiracao = date.fromisoformat(entity.data_expiracao) if entity.data_expiracao else None
        model.quantidade_usos = entity.quantidade_usos
        model.status = StatusCupom(entity.status).value
        return model

    @staticmethod
    def to_dict(entity: Cupom) -> Dict[str, Any]:
        return {
            'id': entity.id,
            'codigo': entity.codigo,
            'tipo_desconto': TipoDesconto(entity.tipo_desconto).value,
            'valor': entity.valor,
            'data_expiracao': entity.data_expiracao,
            'quantidade_usos': entity.quantidade_usos,
            'status': StatusCupom(entity.status).value,
        }

    @staticmethod
    def from_dict(dados: Dict[str, Any]) -> Cupom:
        return Cupom(
            id=dados['id'],
            codigo=dados['codigo'],
            tipo_desconto=TipoDesconto(dados['tipo_desconto']),
            valor=_decimal(dados['valor']),
            data_expiracao=dados.get('data_expiracao'),
            quantidade_usos=int(dados.get('quantidade_usos', 0)),
            status=StatusCupom(dados.get('status', StatusCupom.ATIVO.value)),
        )


class ClienteMapper:

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('vendas', 'Cliente')

    @staticmethod
    def endereco_from_dict(dados: Dict[str, Any]) -> Endereco:
        return Endereco(**dados)

    @staticmethod
    def endereco_to_dict(endereco: Endereco) -> Dict[str, Any]:
        return {
            'nome_completo': endereco.nome_completo,
            'rua': endereco.rua,
            'cidade': endereco.cidade,
            'estado': endereco.estado,
            'cep': endereco.cep,
            'pais': endereco.pais,
        }

    @classmethod
    def to_entity(cls, model: Any) -> Optional[Cliente]:
        if not model: return None
        return Cliente(
            id=model.id,
            nome=model.nome,
            email=model.email,
            senha_hash=model.senha_hash,
            total_pedidos=model.total_pedidos,
            total_gasto=model.total_gasto,
            status=StatusCliente(model.status),
            lista_desejos=sorted(produto.pk for produto in model.lista_desejos.all()),
            enderecos=[cls.endereco_from_dict(e) for e in model.enderecos],
            data_cadastro=_data_iso(model.data_cadastro),
        )

    @classmethod
    def to_model(cls, entity: Cliente, model: Optional[Any] = None) -> Any:
        """Não trata a lista de desejos (relação M2M gravada após o save)."""
        if not model:
            model = cls.model_class()(id=entity.id)
        model.nome = entity.nome
        model.email = entity.email
        model.senha_hash = entity.senha_hash
        model.total_pedidos = entity.total_pedidos
        model.total_gasto = entity.total_gasto
        model.status = StatusCliente(entity.status).value
        model.enderecos = [cls.endereco_to_dict(e) for e in entity.enderecos]
        if entity.data_cadastro:
            model.data_cadastro = date.fromisoformat(entity.data_cadastro)
        return model

    @classmethod
    def to_dict(cls, entity: Cliente) -> Dict[str, Any]:
        return {
            'id': entity.id,
            'nome': entity.nome,
            'email': entity.email,
            'senha_hash': entity.senha_hash,
            'total_pedidos': entity.total_pedidos,
            'total_gasto': entity.total_gasto,
            'status': StatusCliente(entity.status).value,
            'lista_desejos': list(entity.lista_desejos),
            'enderecos': [cls.endereco_to_dict(e) for e in entity.enderecos],
            'data_cadastro': entity.data_cadastro,
        }

    @classmethod
    def from_dict(cls, dados: Dict[str, Any]) -> Cliente:
        return Cliente(
            id=dados['id'],
            nome=dados['nome'],
            email=dados['email'],
            senha_hash=dados.get('senha_hash', ''),
            total_pedidos=int(dados.get('total_pedidos', 0)),
            total_gasto=_decimal(dados.get('total_gasto', '0.00')),
            status=StatusCliente(dados.get('status', StatusCliente.ATIVO.value)),
            lista_desejos=list(dados.get('lista_desejos', [])),
            enderecos=[cls.endereco_from_dict(e) for e in dados.get('enderecos', [])],
            data_cadastro=dados.get('data_cadastro'),
        )


# ====================================================================
# MAPPERS DE SUPORTE E AUDITORIA
# ====================================================================

class RegistroAuditoriaMapper:

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('suporte', 'RegistroAuditoria')

    @staticmethod
    def to_entity(model: Any) -> RegistroAuditoria:
        return RegistroAuditoria(
            id=model.id,
            acao=model.acao,
            alvo_id=model.alvo_id,
            mensagem=model.mensagem,
            autor=model.autor,
            data=model.data,
        )

    @classmethod
    def to_model(cls, entity: RegistroAuditoria) -> Any:
        return cls.model_class()(
            id=entity.id,
            acao=entity.acao,
            alvo_id=entity.alvo_id,
            mensagem=entity.mensagem,
            autor=entity.autor,
            data=entity.data,
        )

    @staticmethod
    def to_dict(entity: RegistroAuditoria) -> Dict[str, Any]:
        return {
            'id': entity.id,
            'acao': entity.acao,
            'alvo_id': entity.alvo_id,
            'mensagem': entity.mensagem,
            'autor': entity.autor,
            'data': entity.data,
        }

    @staticmethod
    def from_dict(dados: Dict[str, Any]) -> RegistroAuditoria:
        return RegistroAuditoria(
            id=dados['id'],
            acao=dados['acao'],
            alvo_id=dados['alvo_id'],
            mensagem=dados['mensagem'],
            autor=dados['autor'],
            data=_data(dados['data']),
        )


class ChamadoMapper:

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('suporte', 'Chamado')

    @staticmethod
    def resposta_to_dict(resposta: RespostaChamado) -> Dict[str, Any]:
        return {
            'id': resposta.id,
            'autor': resposta.autor,
            'mensagem': resposta.mensagem,
            'admin': resposta.admin,
            'data': resposta.data.isoformat(),
        }

    @staticmethod
    def resposta_from_dict(dados: Dict[str, Any]) -> RespostaChamado:
        return RespostaChamado(
            id=dados['id'],
            autor=dados['autor'],
            mensagem=dados['mensagem'],
            admin=bool(dados.get('admin', False)),
            data=_data(dados['data']),
        )

    @classmethod
    def to_entity(cls, model: Any) -> Optional[Chamado]:
        if not model: return None
        return Chamado(
            id=model.id,
            cliente_id=model.cliente_id,
            nome_cliente=model.nome_cliente,
            assunto=model.assunto,
            mensagem=model.mensagem,
            pedido_id=model.pedido_id,
            status=StatusChamado(model.status),
            prioridade=PrioridadeChamado(model.prioridade),
            notas_internas=list(model.notas),
            respostas=[cls.resposta_from_dict(r) for r in model.respostas],
            data_criacao=model.data_criacao,
            data_atualizacao=model.data_atualizacao,
        )

    @classmethod
    def to_model(cls, entity: Chamado, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(id=entity.id)
        model.cliente_id = entity.cliente_id
        model.nome_cliente = entity.nome_cliente
        model.assunto = entity.assunto
        model.mensagem = entity.mensagem
        model.pedido_id = entity.pedido_id
        model.status = StatusChamado(entity.status).value
        model.prioridade = PrioridadeChamado(entity.prioridade).value
        model.notas = list(entity.notas_internas)
        model.respostas = [cls.resposta_to_dict(r) for r in entity.respostas]
        model.data_criacao = entity.data_criacao
        model.data_atualizacao = entity.data_atualizacao
        return model

    @classmethod
    def to_dict(cls, entity: Chamado) -> Dict[str, Any]:
        return {
            'id': entity.id,
            'cliente_id': entity.cliente_id,
            'nome_cliente': entity.nome_cliente,
            'assunto': entity.assunto,
            'mensagem': entity.mensagem,
            'pedido_id': entity.pedido_id,
            'status': StatusChamado(entity.status).value,
            'prioridade': PrioridadeChamado(entity.prioridade).value,
            'notas_internas': list(entity.notas_internas),
            'respostas': [cls.resposta_to_dict(r) for r in entity.respostas],
            'data_criacao': entity.data_criacao,
            'data_atualizacao': entity.data_atualizacao,
        }

    @classmethod
    def from_dict(cls, dados: Dict[str, Any]) -> Chamado:
        return Chamado(
            id=dados['id'],
            cliente_id=dados['cliente_id'],
            nome_cliente=dados['nome_cliente'],
            assunto=dados['assunto'],
            mensagem=dados['mensagem'],
            pedido_id=dados.get('pedido_id'),
            status=StatusChamado(dados['status']),
            prioridade=PrioridadeChamado(dados['prioridade']),
            notas_internas=list(dados.get('notas_internas', [])),
            respostas=[cls.resposta_from_dict(r) for r in dados.get('respostas', [])],
            data_criacao=_data(dados['data_criacao']),
            data_atualizacao=_data(dados['data_atualizacao']),
        )
