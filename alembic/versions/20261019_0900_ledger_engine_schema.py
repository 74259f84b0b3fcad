"""Ledger engine schema

Revision ID: 20261019_0900_ledger_engine_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates the general ledger and the modules that post into it:
- gl_accounts, journal_entries, journal_lines, number_sequences
- expenses, sales_invoices, sales_invoice_lines
- stock_counts, stock_count_items
- fixed_assets, depreciation_entries, disposal_records
- bank_accounts, exchange_rates, revaluation_entries
- employees, payroll_runs, payroll_entries

Enum columns store member names, matching SQLAlchemy's Enum default.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '20261019_0900_ledger_engine_schema'
down_revision = None
branch_labels = None
depends_on = None


UUID = postgresql.UUID(as_uuid=True)
MONEY = sa.Numeric(18, 2)
RATE = sa.Numeric(18, 6)
QUANTITY = sa.Numeric(18, 3)

ENUMS = {
    'accounttype': ('ASSET', 'LIABILITY', 'EQUITY', 'INCOME', 'EXPENSE'),
    'journalentrystatus': ('DRAFT', 'POSTED', 'VOID'),
    'journalentrytype': (
        'MANUAL', 'EXPENSE', 'SALES', 'INVENTORY_ADJUSTMENT', 'DEPRECIATION',
        'ASSET_DISPOSAL', 'FX_REVALUATION', 'PAYROLL', 'ADJUSTMENT',
    ),
    'expensecategory': (
        'ADVERTISING', 'BANK_FEES', 'CONTRACTOR', 'ENTERTAINMENT', 'EQUIPMENT',
        'INSURANCE', 'INVENTORY', 'MEALS', 'MOTOR_VEHICLE', 'OFFICE_SUPPLIES',
        'PROFESSIONAL_SERVICES', 'RENT', 'REPAIRS', 'RESTAURANT', 'SALARIES',
        'SOFTWARE', 'TAXES', 'TELEPHONE', 'TRAVEL', 'UTILITIES', 'VEHICLE',
        'VEHICLE_FUEL', 'VEHICLE_MAINTENANCE', 'OTHER',
    ),
    'paymentmethod': ('CASH', 'BANK', 'CREDIT'),
    'expensestatus': ('DRAFT', 'POSTED'),
    'gctratecategory': ('STANDARD', 'TELECOM', 'TOURISM', 'ZERO_RATED', 'EXEMPT'),
    'invoicestatus': ('DRAFT', 'POSTED', 'VOID'),
    'stockcountstatus': (
        'DRAFT', 'IN_PROGRESS', 'PENDING_REVIEW', 'APPROVED', 'POSTED', 'CANCELLED',
    ),
    'assetstatus': ('ACTIVE', 'DISPOSED'),
    'depreciationmethod': ('STRAIGHT_LINE', 'REDUCING_BALANCE'),
    'capitalallowanceclass': (
        'BUILDINGS', 'PLANT_MACHINERY', 'MOTOR_VEHICLES', 'COMPUTERS',
        'FURNITURE_FIXTURES', 'SOFTWARE', 'LEASEHOLD_IMPROVEMENTS',
    ),
    'disposalmethod': (
        'SALE', 'TRADE_IN', 'SCRAP', 'DONATION', 'THEFT', 'WRITE_OFF', 'TRANSFER',
    ),
    'payfrequency': ('WEEKLY', 'BIWEEKLY', 'MONTHLY'),
    'terminationreason': ('REDUNDANCY', 'RESIGNATION', 'RETIREMENT', 'TERMINATION', 'ESTIMATE'),
    'payrollruntype': ('REGULAR', 'SPECIAL'),
    'payrollrunstatus': ('DRAFT', 'PROCESSED'),
}


def enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def common_columns(tenant: bool = True, audit: bool = True):
    """id, timestamps, and optionally tenant_id and the audit user columns."""
    columns = [
        sa.Column('id', UUID, primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]
    if tenant:
        columns.append(sa.Column('tenant_id', UUID, nullable=False, index=True))
    if audit:
        columns.append(sa.Column('created_by_id', UUID, nullable=True))
        columns.append(sa.Column('updated_by_id', UUID, nullable=True))
    return columns


def upgrade() -> None:
    """Create ledger engine tables."""
    connection = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(connection, checkfirst=True)

    # ------------------------------------------------------------------
    # General ledger
    # ------------------------------------------------------------------
    op.create_table(
        'gl_accounts',
        *common_columns(),
        sa.Column('account_code', sa.String(20), nullable=False),
        sa.Column('account_name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('account_type', enum('accounttype'), nullable=False, index=True),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column('is_system_account', sa.Boolean, server_default=sa.false(), nullable=False,
                  comment='Seeded account used by automatic postings'),
        sa.Column('current_balance', MONEY, server_default='0', nullable=False),
        sa.UniqueConstraint('tenant_id', 'account_code', name='uq_gl_account_tenant_code'),
    )
    op.create_index('ix_gl_accounts_tenant_type', 'gl_accounts', ['tenant_id', 'account_type'])

    op.create_table(
        'journal_entries',
        *common_columns(),
        sa.Column('entry_number', sa.String(50), nullable=False),
        sa.Column('entry_date', sa.Date, nullable=False, index=True),
        sa.Column('entry_type', enum('journalentrytype'), server_default='MANUAL', nullable=False),
        sa.Column('source_module', sa.String(50), nullable=True),
        sa.Column('source_document_id', UUID, nullable=True),
        sa.Column('description', sa.String(500), nullable=False),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('total_debit', MONEY, server_default='0', nullable=False),
        sa.Column('total_credit', MONEY, server_default='0', nullable=False),
        sa.Column('status', enum('journalentrystatus'), server_default='DRAFT', nullable=False, index=True),
        sa.Column('posted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('posted_by_id', UUID, nullable=True),
        sa.Column('voided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('voided_by_id', UUID, nullable=True),
        sa.Column('void_reason', sa.Text, nullable=True),
        sa.Column('entry_metadata', sa.JSON, nullable=True),
        sa.UniqueConstraint('tenant_id', 'entry_number', name='uq_journal_entry_number'),
        sa.CheckConstraint('total_debit = total_credit', name='ck_journal_entries_balanced_entry'),
    )
    op.create_index('ix_journal_entries_source', 'journal_entries', ['source_module', 'source_document_id'])

    op.create_table(
        'journal_lines',
        *common_columns(tenant=False, audit=False),
        sa.Column('journal_entry_id', UUID, sa.ForeignKey('journal_entries.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('account_id', UUID, sa.ForeignKey('gl_accounts.id', ondelete='RESTRICT'),
                  nullable=False, index=True),
        sa.Column('line_number', sa.Integer, nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('debit_amount', MONEY, server_default='0', nullable=False),
        sa.Column('credit_amount', MONEY, server_default='0', nullable=False),
        sa.UniqueConstraint('journal_entry_id', 'line_number', name='uq_journal_line_number'),
        sa.CheckConstraint(
            '(debit_amount > 0 AND credit_amount = 0) OR (credit_amount > 0 AND debit_amount = 0)',
            name='ck_journal_lines_one_sided_line',
        ),
    )

    op.create_table(
        'number_sequences',
        *common_columns(audit=False),
        sa.Column('sequence_name', sa.String(50), nullable=False),
        sa.Column('last_value', sa.Integer, server_default='0', nullable=False),
        sa.UniqueConstraint('tenant_id', 'sequence_name', name='uq_number_sequence_tenant_name'),
    )

    # ------------------------------------------------------------------
    # Expenses and sales
    # ------------------------------------------------------------------
    op.create_table(
        'expenses',
        *common_columns(),
        sa.Column('expense_number', sa.String(50), nullable=False),
        sa.Column('expense_date', sa.Date, nullable=False, index=True),
        sa.Column('category', enum('expensecategory'), nullable=False),
        sa.Column('description', sa.String(500), nullable=False),
        sa.Column('vendor_name', sa.String(255), nullable=True),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('gct_amount', MONEY, server_default='0', nullable=False),
        sa.Column('gct_claimable', MONEY, server_default='0', nullable=False),
        sa.Column('gct_restricted', MONEY, server_default='0', nullable=False),
        sa.Column('gct_deferred', MONEY, server_default='0', nullable=False),
        sa.Column('mixed_supply_ratio', sa.Numeric(8, 4), nullable=True),
        sa.Column('requires_phased_recovery', sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column('is_capital_purchase', sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column('payment_method', enum('paymentmethod'), server_default='CASH', nullable=False),
        sa.Column('status', enum('expensestatus'), server_default='DRAFT', nullable=False, index=True),
        sa.Column('expense_account_id', UUID, sa.ForeignKey('gl_accounts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('journal_entry_id', UUID, sa.ForeignKey('journal_entries.id', ondelete='SET NULL'), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('attributes', sa.JSON, nullable=True),
        sa.UniqueConstraint('tenant_id', 'expense_number', name='uq_expense_tenant_number'),
    )

    op.create_table(
        'sales_invoices',
        *common_columns(),
        sa.Column('invoice_number', sa.String(50), nullable=False),
        sa.Column('invoice_date', sa.Date, nullable=False, index=True),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('subtotal', MONEY, server_default='0', nullable=False),
        sa.Column('gct_amount', MONEY, server_default='0', nullable=False),
        sa.Column('total_amount', MONEY, server_default='0', nullable=False),
        sa.Column('status', enum('invoicestatus'), server_default='DRAFT', nullable=False, index=True),
        sa.Column('journal_entry_id', UUID, sa.ForeignKey('journal_entries.id', ondelete='SET NULL'), nullable=True),
        sa.UniqueConstraint('tenant_id', 'invoice_number', name='uq_sales_invoice_tenant_number'),
    )

    op.create_table(
        'sales_invoice_lines',
        *common_columns(tenant=False, audit=False),
        sa.Column('invoice_id', UUID, sa.ForeignKey('sales_invoices.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('line_number', sa.Integer, nullable=False),
        sa.Column('description', sa.String(500), nullable=False),
        sa.Column('quantity', QUANTITY, server_default='1', nullable=False),
        sa.Column('unit_price', MONEY, nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('gct_rate_category', enum('gctratecategory'), server_default='STANDARD', nullable=False),
        sa.Column('gct_amount', MONEY, server_default='0', nullable=False),
    )

    # ------------------------------------------------------------------
    # Stock counts
    # ------------------------------------------------------------------
    op.create_table(
        'stock_counts',
        *common_columns(),
        sa.Column('count_number', sa.String(50), nullable=False),
        sa.Column('count_date', sa.Date, nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('status', enum('stockcountstatus'), server_default='DRAFT', nullable=False, index=True),
        sa.Column('total_items', sa.Integer, server_default='0', nullable=False),
        sa.Column('items_counted', sa.Integer, server_default='0', nullable=False),
        sa.Column('items_with_variance', sa.Integer, server_default='0', nullable=False),
        sa.Column('total_variance_value', MONEY, server_default='0', nullable=False),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by_id', UUID, nullable=True),
        sa.Column('posted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('journal_entry_id', UUID, sa.ForeignKey('journal_entries.id', ondelete='SET NULL'), nullable=True),
        sa.UniqueConstraint('tenant_id', 'count_number', name='uq_stock_count_tenant_number'),
    )

    op.create_table(
        'stock_count_items',
        *common_columns(tenant=False, audit=False),
        sa.Column('stock_count_id', UUID, sa.ForeignKey('stock_counts.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('item_code', sa.String(50), nullable=False),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('expected_quantity', QUANTITY, nullable=False),
        sa.Column('counted_quantity', QUANTITY, nullable=True),
        sa.Column('unit_cost', MONEY, nullable=False),
        sa.Column('variance_quantity', QUANTITY, server_default='0', nullable=False),
        sa.Column('variance_value', MONEY, server_default='0', nullable=False),
        sa.Column('counted_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('stock_count_id', 'item_code', name='uq_stock_count_item_code'),
    )

    # ------------------------------------------------------------------
    # Fixed assets
    # ------------------------------------------------------------------
    op.create_table(
        'fixed_assets',
        *common_columns(),
        sa.Column('asset_code', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('status', enum('assetstatus'), server_default='ACTIVE', nullable=False, index=True),
        sa.Column('acquisition_date', sa.Date, nullable=False),
        sa.Column('acquisition_cost', MONEY, nullable=False),
        sa.Column('capitalized_costs', MONEY, server_default='0', nullable=False),
        sa.Column('depreciation_method', enum('depreciationmethod'), server_default='STRAIGHT_LINE', nullable=False),
        sa.Column('depreciation_rate', sa.Numeric(8, 4), server_default='0', nullable=False),
        sa.Column('useful_life_years', sa.Integer, nullable=True),
        sa.Column('residual_value', MONEY, server_default='0', nullable=False),
        sa.Column('accumulated_depreciation', MONEY, server_default='0', nullable=False),
        sa.Column('last_depreciation_date', sa.Date, nullable=True),
        sa.Column('capital_allowance_class', enum('capitalallowanceclass'), nullable=False),
        sa.Column('tax_eligible_cost', MONEY, nullable=False),
        sa.Column('accumulated_capital_allowances', MONEY, server_default='0', nullable=False),
        sa.Column('depreciation_expense_account_id', UUID,
                  sa.ForeignKey('gl_accounts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('accumulated_depreciation_account_id', UUID,
                  sa.ForeignKey('gl_accounts.id', ondelete='SET NULL'), nullable=True),
        sa.UniqueConstraint('tenant_id', 'asset_code', name='uq_fixed_asset_tenant_code'),
    )

    op.create_table(
        'depreciation_entries',
        *common_columns(audit=False),
        sa.Column('asset_id', UUID, sa.ForeignKey('fixed_assets.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('fiscal_year', sa.Integer, nullable=False),
        sa.Column('opening_book_value', MONEY, nullable=False),
        sa.Column('depreciation_amount', MONEY, nullable=False),
        sa.Column('closing_book_value', MONEY, nullable=False),
        sa.Column('depreciation_method', enum('depreciationmethod'), nullable=False),
        sa.Column('opening_written_down_value', MONEY, nullable=False),
        sa.Column('initial_allowance', MONEY, server_default='0', nullable=False),
        sa.Column('annual_allowance', MONEY, server_default='0', nullable=False),
        sa.Column('closing_written_down_value', MONEY, nullable=False),
        sa.Column('journal_entry_id', UUID, sa.ForeignKey('journal_entries.id', ondelete='SET NULL'), nullable=True),
        sa.UniqueConstraint('asset_id', 'fiscal_year', name='uq_depreciation_entry_asset_year'),
    )

    op.create_table(
        'disposal_records',
        *common_columns(),
        sa.Column('asset_id', UUID, sa.ForeignKey('fixed_assets.id', ondelete='CASCADE'),
                  nullable=False, unique=True),
        sa.Column('disposal_date', sa.Date, nullable=False),
        sa.Column('disposal_method', enum('disposalmethod'), nullable=False),
        sa.Column('proceeds', MONEY, server_default='0', nullable=False),
        sa.Column('currency', sa.String(3), server_default='JMD', nullable=False),
        sa.Column('exchange_rate', RATE, server_default='1', nullable=False),
        sa.Column('proceeds_jmd', MONEY, nullable=False),
        sa.Column('cost_at_disposal', MONEY, nullable=False),
        sa.Column('accumulated_depreciation_at_disposal', MONEY, nullable=False),
        sa.Column('net_book_value_at_disposal', MONEY, nullable=False),
        sa.Column('book_gain_loss', MONEY, nullable=False),
        sa.Column('written_down_value_at_disposal', MONEY, nullable=False),
        sa.Column('allowances_claimed', MONEY, nullable=False),
        sa.Column('balancing_amount', MONEY, nullable=False),
        sa.Column('balancing_charge', MONEY, server_default='0', nullable=False),
        sa.Column('balancing_allowance', MONEY, server_default='0', nullable=False),
        sa.Column('buyer_name', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
    )

    # ------------------------------------------------------------------
    # Foreign exchange
    # ------------------------------------------------------------------
    op.create_table(
        'bank_accounts',
        *common_columns(audit=False),
        sa.Column('account_name', sa.String(255), nullable=False),
        sa.Column('bank_name', sa.String(255), nullable=True),
        sa.Column('account_number', sa.String(50), nullable=True),
        sa.Column('currency', sa.String(3), server_default='JMD', nullable=False),
        sa.Column('current_balance', MONEY, server_default='0', nullable=False),
        sa.Column('original_exchange_rate', RATE, nullable=True),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column('gl_account_id', UUID, sa.ForeignKey('gl_accounts.id', ondelete='SET NULL'), nullable=True),
    )

    op.create_table(
        'exchange_rates',
        *common_columns(audit=False),
        sa.Column('from_currency', sa.String(3), nullable=False),
        sa.Column('to_currency', sa.String(3), nullable=False),
        sa.Column('rate', RATE, nullable=False),
        sa.Column('rate_date', sa.Date, nullable=False),
        sa.Column('source', sa.String(50), nullable=True),
    )
    op.create_index(
        'ix_exchange_rates_pair_date', 'exchange_rates',
        ['tenant_id', 'from_currency', 'to_currency', 'rate_date'],
    )

    op.create_table(
        'revaluation_entries',
        *common_columns(audit=False),
        sa.Column('bank_account_id', UUID, sa.ForeignKey('bank_accounts.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('revaluation_month', sa.Date, nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('previous_rate', RATE, nullable=False),
        sa.Column('current_rate', RATE, nullable=False),
        sa.Column('foreign_balance', MONEY, nullable=False),
        sa.Column('previous_jmd_value', MONEY, nullable=False),
        sa.Column('current_jmd_value', MONEY, nullable=False),
        sa.Column('unrealized_gain_loss', MONEY, nullable=False),
        sa.UniqueConstraint('bank_account_id', 'revaluation_month', name='uq_revaluation_account_month'),
    )

    # ------------------------------------------------------------------
    # Payroll
    # ------------------------------------------------------------------
    op.create_table(
        'employees',
        *common_columns(),
        sa.Column('employee_number', sa.String(50), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('hire_date', sa.Date, nullable=False),
        sa.Column('base_salary', MONEY, nullable=False),
        sa.Column('pay_frequency', enum('payfrequency'), server_default='MONTHLY', nullable=False),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column('termination_date', sa.Date, nullable=True),
        sa.Column('termination_reason', enum('terminationreason'), nullable=True),
        sa.UniqueConstraint('tenant_id', 'employee_number', name='uq_employee_tenant_number'),
    )

    op.create_table(
        'payroll_runs',
        *common_columns(),
        sa.Column('run_number', sa.String(50), nullable=False),
        sa.Column('run_type', enum('payrollruntype'), server_default='REGULAR', nullable=False),
        sa.Column('status', enum('payrollrunstatus'), server_default='DRAFT', nullable=False),
        sa.Column('pay_date', sa.Date, nullable=False),
        sa.Column('period_start', sa.Date, nullable=False),
        sa.Column('period_end', sa.Date, nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('total_gross', MONEY, server_default='0', nullable=False),
        sa.Column('total_net', MONEY, server_default='0', nullable=False),
        sa.UniqueConstraint('tenant_id', 'run_number', name='uq_payroll_run_tenant_number'),
    )

    op.create_table(
        'payroll_entries',
        *common_columns(audit=False),
        sa.Column('payroll_run_id', UUID, sa.ForeignKey('payroll_runs.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('employee_id', UUID, sa.ForeignKey('employees.id', ondelete='RESTRICT'),
                  nullable=False, index=True),
        sa.Column('payment_type', sa.String(50), server_default='salary', nullable=False),
        sa.Column('gross_pay', MONEY, nullable=False),
        sa.Column('paye', MONEY, server_default='0', nullable=False),
        sa.Column('nis', MONEY, server_default='0', nullable=False),
        sa.Column('nht', MONEY, server_default='0', nullable=False),
        sa.Column('education_tax', MONEY, server_default='0', nullable=False),
        sa.Column('net_pay', MONEY, nullable=False),
        sa.Column('is_tax_exempt', sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column('notes', sa.Text, nullable=True),
    )


def downgrade() -> None:
    """Drop ledger engine tables."""
    for table in (
        'payroll_entries', 'payroll_runs', 'employees',
        'revaluation_entries', 'exchange_rates', 'bank_accounts',
        'disposal_records', 'depreciation_entries', 'fixed_assets',
        'stock_count_items', 'stock_counts',
        'sales_invoice_lines', 'sales_invoices', 'expenses',
        'number_sequences', 'journal_lines', 'journal_entries', 'gl_accounts',
    ):
        op.drop_table(table)

    for name in reversed(list(ENUMS)):
        sa.Enum(name=name).drop(op.get_bind(), checkfirst=True)
