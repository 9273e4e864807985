"""initial_business_schema

Revision ID: 3f2b9c1d7e4a
Revises:
Create Date: 2026-10-19 09:12:41.508233

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2b9c1d7e4a'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(precision=15, scale=2)

# (table, column) pairs that get a plain lookup index
INDEXED_COLUMNS = [
    ('customers', 'user_id'),
    ('departments', 'user_id'),
    ('employees', 'user_id'),
    ('employees', 'department_id'),
    ('complaints', 'user_id'),
    ('complaints', 'customer_id'),
    ('complaints', 'assigned_to'),
    ('teams', 'user_id'),
    ('teams', 'department_id'),
    ('teams', 'leader_id'),
    ('team_members', 'team_id'),
    ('team_members', 'employee_id'),
    ('products', 'user_id'),
    ('products', 'category'),
    ('financial_records', 'user_id'),
    ('financial_records', 'customer_id'),
    ('projects', 'user_id'),
    ('projects', 'team_id'),
    ('budgets', 'user_id'),
    ('budgets', 'department_id'),
    ('budgets', 'project_id'),
    ('meetings', 'user_id'),
    ('meetings', 'team_id'),
    ('meetings', 'project_id'),
    ('meetings', 'date'),
    ('tasks', 'user_id'),
    ('tasks', 'assigned_to'),
    ('tasks', 'project_id'),
    ('tasks', 'team_id'),
]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def _owner() -> sa.Column:
    return sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False)


def upgrade() -> None:
    """
    Create the business schema.

    Creates:
    - users (account root; every other row is owned by one)
    - customers, complaints
    - departments, employees, teams, team_members
    - products, financial_records, budgets
    - projects, meetings, tasks

    departments.manager_id and employees.department_id reference each
    other, so the manager foreign key is added after both tables exist.
    """
    # 1. Account root
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=150), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('business_type', sa.String(length=100), nullable=True),
        sa.Column('web_link', sa.String(length=500), nullable=True),
        sa.Column('logo', sa.String(length=500), nullable=True),
        sa.Column('about', sa.Text(), nullable=True),
        sa.Column('contact_info', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    # 2. Customers
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        _owner(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('total_sales', MONEY, nullable=False),
        sa.Column('total_purchases', MONEY, nullable=False),
        sa.Column('complaint_count', sa.Integer(), nullable=False),
        sa.Column('customer_satisfaction', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )

    # 3. Organisation (manager FK added below)
    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), nullable=False),
        _owner(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('manager_id', sa.Integer(), nullable=True),
        sa.Column('budget', MONEY, nullable=True),
        sa.Column('goals', sa.JSON(), nullable=True),
        sa.Column('headcount', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), nullable=False),
        _owner(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('position', sa.String(length=255), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('permissions', sa.JSON(), nullable=True),
        sa.Column('performance', sa.Integer(), nullable=False),
        sa.Column('salary', MONEY, nullable=True),
        sa.Column('tasks_completed', sa.Integer(), nullable=False),
        sa.Column('tasks_assigned', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table('departments') as batch_op:
        batch_op.create_foreign_key(
            'fk_departments_manager_id', 'employees', ['manager_id'], ['id']
        )

    op.create_table(
        'complaints',
        sa.Column('id', sa.Integer(), nullable=False),
        _owner(),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('priority', sa.String(length=20), nullable=False),
        sa.Column('assigned_to', sa.Integer(), sa.ForeignKey('employees.id'), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('satisfaction_rating', sa.Integer(), nullable=True),
        sa.Column('resolution', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), nullable=False),
        _owner(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('leader_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=True),
        sa.Column('goals', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_table(
        'team_members',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('role', sa.String(length=100), nullable=True),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('permissions', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'employee_id', name='uq_team_employee'),
        sqlite_autoincrement=True,
    )

    # 4. Catalogue and finances
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        _owner(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', MONEY, nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('inventory', sa.Integer(), nullable=False),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        sa.Column('sales', sa.Integer(), nullable=False),
        sa.Column('revenue', MONEY, nullable=False),
        sa.Column('cost', MONEY, nullable=True),
        sa.Column('discount', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('promo_code', sa.String(length=50), nullable=True),
        sa.Column('social_media_links', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_table(
        'financial_records',
        sa.Column('id', sa.Integer(), nullable=False),
        _owner(),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('reference', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index(
        'ix_financial_records_customer_type', 'financial_records', ['customer_id', 'type']
    )

    # 5. Work tracking
    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), nullable=False),
        _owner(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('budget', MONEY, nullable=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=True),
        sa.Column('progress', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer(), nullable=False),
        _owner(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=True),
        sa.Column('actual_spend', MONEY, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_table(
        'meetings',
        sa.Column('id', sa.Integer(), nullable=False),
        _owner(),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=True),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), nullable=False),
        _owner(),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('priority', sa.String(length=20), nullable=False),
        sa.Column('assigned_to', sa.Integer(), sa.ForeignKey('employees.id'), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=True),
        sa.Column('cost', MONEY, nullable=True),
        sa.Column('progress', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('completed_date', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )

    # 6. Lookup indexes
    for table, column in INDEXED_COLUMNS:
        op.create_index(op.f(f'ix_{table}_{column}'), table, [column])


def downgrade() -> None:
    """Drop the business schema."""
    for table, column in reversed(INDEXED_COLUMNS):
        op.drop_index(op.f(f'ix_{table}_{column}'), table_name=table)
    op.drop_index('ix_financial_records_customer_type', table_name='financial_records')

    for table in ('tasks', 'meetings', 'budgets', 'projects', 'financial_records', 'products'):
        op.drop_table(table)
    for table in ('team_members', 'teams', 'complaints'):
        op.drop_table(table)

    with op.batch_alter_table('departments') as batch_op:
        batch_op.drop_constraint('fk_departments_manager_id', type_='foreignkey')
    op.drop_table('employees')
    op.drop_table('departments')
    op.drop_table('customers')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_table('users')
