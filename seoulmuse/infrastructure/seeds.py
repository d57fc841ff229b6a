"""
Dados iniciais da loja, compartilhados pelo comando carregar_dados_iniciais
(variante relacional) e pela semeadura das coleções locais.
Cada função devolve objetos novos a cada chamada.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import List

from seoulmuse.core.entities import (
    Cliente, Cupom, ItemPedido, Pedido, Produto, StatusCliente, StatusPedido, StatusProduto, TipoDesconto,
)

_IMAGEM = 'https://images.unsplash.com/{}?auto=format&fit=crop&q=80&w=800'

# (id, nome, sku, preço, estoque, categoria, calor social, foto)
_PRODUTOS = [
    ('g1', 'Petal Ribbon Silk Blouse', 'SM-001', '42.00', 45, 'Tops', 98, 'photo-1564252629749-fb2d4212ffec'),
    ('g2', 'Hongdae Tennis Mini Skirt', 'SM-002', '35.00', 120, 'Skirts', 85, 'photo-1582142839970-2b9e04b60f65'),
    ('g3', 'Vintage Tweed Set - Ivory', 'SM-003', '125.00', 18, 'Co-ords', 92, 'photo-1618244972963-dbee1a7edc95'),
    ('g4', 'Lace-Up Romantic Midi', 'SM-004', '89.00', 25, 'Dresses', 76, 'photo-1572804013309-59a88b7e92f1'),
    ('g5', 'Seongsu Oversized Knit', 'SM-005', '58.00', 60, 'Tops', 89, 'photo-1624206112918-f140f087f9b5'),
    ('g6', 'Moonlight Satin Slip', 'SM-006', '65.00', 12, 'Dresses', 95, 'photo-1595777457583-95e059d581b8'),
]


def produtos_iniciais() -> List[Produto]:
    return [
        Produto(
            id=produto_id,
            nome=nome,
            sku=sku,
            preco=Decimal(preco),
            estoque=estoque,
            categoria=categoria,
            status=StatusProduto.ATIVO,
            calor_social=calor,
            imagem=_IMAGEM.format(foto),
            # Datas distintas para a ordenação por criação ser determinística
            data_criacao=datetime(2023, 10, 1 + indice, tzinfo=timezone.utc),
        )
        for indice, (produto_id, nome, sku, preco, estoque, categoria, calor, foto) in enumerate(_PRODUTOS)
    ]


def pedidos_iniciais() -> List[Pedido]:
    return [
        Pedido(
            id='ORD-9901',
            nome_cliente='Soo-young Park',
            email_cliente='s.park@example.com',
            itens=[ItemPedido(produto_id='g3', nome='Vintage Tweed Set', quantidade=1, preco_unitario=Decimal('125.00'))],
            subtotal=Decimal('125.00'),
            imposto=Decimal('0.00'),
            desconto=Decimal('0.00'),
            frete=Decimal('0.00'),
            total=Decimal('125.00'),
            status=StatusPedido.PAGO,
            forma_pagamento='KakaoPay',
            endereco_entrega='123 Gangnam-daero, Seoul, KR',
            data_pedido=datetime(2023, 11, 5, tzinfo=timezone.utc),
        ),
        Pedido(
            id='ORD-9902',
            nome_cliente='Chloe Bennett',
            email_cliente='chloe.b@example.com',
            itens=[
                ItemPedido(produto_id='g1', nome='Petal Ribbon Silk Blouse', quantidade=1, preco_unitario=Decimal('42.00')),
                ItemPedido(produto_id='g2', nome='Tennis Mini Skirt', quantidade=1, preco_unitario=Decimal('35.00')),
            ],
            subtotal=Decimal('77.00'),
            imposto=Decimal('0.00'),
            desconto=Decimal('0.00'),
            frete=Decimal('0.00'),
            total=Decimal('77.00'),
            status=StatusPedido.ENVIADO,
            forma_pagamento='Credit Card',
            endereco_entrega='456 Oxford St, London, UK',
            data_pedido=datetime(2023, 11, 6, tzinfo=timezone.utc),
        ),
    ]


def clientes_iniciais() -> List[Cliente]:
    return [
        Cliente(id='c1', nome='Soo-young Park', email='s.park@example.com', total_pedidos=12,
                total_gasto=Decimal('1450.00'), status=StatusCliente.ATIVO, data_cadastro='2023-01-12'),
        Cliente(id='c2', nome='James Wilson', email='j.wilson@example.com', total_pedidos=1,
                total_gasto=Decimal('42.00'), status=StatusCliente.ATIVO, data_cadastro='2023-11-02'),
        Cliente(id='c3', nome='Min-ji Kim', email='minji@kpop.kr', total_pedidos=45,
                total_gasto=Decimal('5200.00'), status=StatusCliente.ATIVO, data_cadastro='2022-05-20'),
    ]


def cupons_iniciais() -> List[Cupom]:
    return [
        Cupom(id='cp1', codigo='SEOUL20', tipo_desconto=TipoDesconto.PERCENTUAL, valor=Decimal('20'),
              data_expiracao='2024-12-31', quantidade_usos=145),
        Cupom(id='cp2', codigo='FIRSTMUSE', tipo_desconto=TipoDesconto.FIXO, valor=Decimal('10'),
              data_expiracao='2024-06-30', quantidade_usos=890),
    ]
