"""create users, accounts, transactions, investments and budgets tables

Revision ID: 3c1f9a7d2b10
Revises: 
Create Date: 2026-10-19 10:12:44.310592

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

currency = sa.Enum('USD', 'VES', name='currency')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('username', name='uq_user_username'),
    )
    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id'), nullable=True),
        sa.Column('account_name', sa.String(255), nullable=False),
        sa.Column('account_type', sa.Enum('CHECKING', 'SAVINGS', 'CASH', 'CREDIT_CARD', 'WALLET', 'OTHER',
                                          name='accounttype'), nullable=True),
        sa.Column('currency', currency, nullable=False),
        sa.Column('institution_name', sa.String(255), nullable=True),
        sa.Column('balance', sa.DECIMAL(18, 2), nullable=True),
        sa.Column('balance_last_updated', sa.DateTime, nullable=True),
        sa.Column('comments', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', 'account_name', name='uq_user_account_name'),
    )
    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id'), nullable=True),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('destination_account_id', sa.Integer, sa.ForeignKey('accounts.id'), nullable=True),
        sa.Column('transaction_date', sa.Date, nullable=False),
        sa.Column('transaction_type', sa.Enum('INCOME', 'EXPENSE', 'TRANSFER', 'ADJUSTMENT',
                                              name='transactiontype'), nullable=False),
        sa.Column('amount', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('currency', currency, nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('adjustment_direction', sa.Enum('UP', 'DOWN', name='adjustmentdirection'), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_transactions_user_date', 'transactions', ['user_id', 'transaction_date'])
    op.create_index('idx_transactions_user_account', 'transactions', ['user_id', 'account_id'])
    op.create_index('idx_transactions_user_category', 'transactions', ['user_id', 'category'])

    op.create_table(
        'investments',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id'), nullable=True),
        sa.Column('symbol', sa.String(20), nullable=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('quantity', sa.DECIMAL(18, 6), nullable=False),
        sa.Column('buy_price', sa.DECIMAL(18, 4), nullable=False),
        sa.Column('buy_commission', sa.DECIMAL(18, 2), nullable=True),
        sa.Column('current_price', sa.DECIMAL(18, 4), nullable=True),
        sa.Column('last_price_update', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_investments_user', 'investments', ['user_id'])

    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id'), nullable=True),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),  # "YYYY-MM"
        sa.Column('currency', currency, nullable=False),
        sa.Column('limit_amount', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', 'category', 'month', name='uq_user_category_month'),
    )
    op.create_index('idx_budgets_user_month', 'budgets', ['user_id', 'month'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_budgets_user_month', table_name='budgets')
    op.drop_table('budgets')
    op.drop_index('idx_investments_user', table_name='investments')
    op.drop_table('investments')
    op.drop_index('idx_transactions_user_category', table_name='transactions')
    op.drop_index('idx_transactions_user_account', table_name='transactions')
    op.drop_index('idx_transactions_user_date', table_name='transactions')
    op.drop_table('transactions')
    op.drop_table('accounts')
    op.drop_table('users')
