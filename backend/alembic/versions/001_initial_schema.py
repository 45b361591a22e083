"""Initial schema

Tables:
    - trades: Buys and sells of the tracked tickers
    - prices: Daily closing prices, one row per ticker and date

Revision ID: 001
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # TRADES
    # ==========================================================================
    op.create_table(
        'trades',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('ticker', sa.String(), nullable=False, index=True),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('trade_type', sa.Enum('BUY', 'SELL', name='tradetype'), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(18, 8), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_trade_ticker_date', 'trades', ['ticker', 'date'])

    # ==========================================================================
    # PRICES
    # ==========================================================================
    op.create_table(
        'prices',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('ticker', sa.String(), nullable=False, index=True),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('close_price', sa.Numeric(18, 8), nullable=False),
        sa.Column('provider', sa.String(50), nullable=False, server_default='alpha_vantage'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('ticker', 'date', name='uq_price_ticker_date'),
    )


def downgrade() -> None:
    op.drop_table('prices')
    op.drop_index('ix_trade_ticker_date', table_name='trades')
    op.drop_table('trades')

    op.execute('DROP TYPE IF EXISTS tradetype')
