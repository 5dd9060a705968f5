"""initial schedule schema

Revision ID: 1f3a9c0d2b7e
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

# revision identifiers, used by Alembic.
revision = '1f3a9c0d2b7e'
down_revision = None

from alembic import op
import sqlalchemy as sa


def metadata_table(name, owner_column, owner_table):
    op.create_table(name,
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column(owner_column, sa.Integer(), nullable=False),
    sa.Column('key_id', sa.Integer(), nullable=False),
    sa.Column('settor_id', sa.Integer(), nullable=False),
    sa.Column('approver_id', sa.Integer(), nullable=True),
    sa.Column('value', sa.Text(), nullable=False),
    sa.Column('effective_from', sa.DateTime(), nullable=False),
    sa.Column('effective_to', sa.DateTime(), nullable=True),
    sa.ForeignKeyConstraint(['key_id'], ['metadata_key.id'], name=op.f(f'fk_{name}_key_id_metadata_key')),
    sa.ForeignKeyConstraint([owner_column], [f'{owner_table}.id'], name=op.f(f'fk_{name}_{owner_column}_{owner_table}')),
    sa.ForeignKeyConstraint(['settor_id'], ['user.id'], name=op.f(f'fk_{name}_settor_id_user')),
    sa.ForeignKeyConstraint(['approver_id'], ['user.id'], name=op.f(f'fk_{name}_approver_id_user')),
    sa.PrimaryKeyConstraint('id', name=op.f(f'pk_{name}'))
    )
    for column in (owner_column, 'key_id', 'effective_from', 'effective_to'):
        op.create_index(op.f(f'ix_{name}_{column}'), name, [column], unique=False)


def upgrade():
    op.create_table('user',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('fname', sa.String(), nullable=False),
    sa.Column('sname', sa.String(), nullable=False),
    sa.Column('email', sa.String(), nullable=True),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_user'))
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)

    op.create_table('permission',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_permission'))
    )
    op.create_index(op.f('ix_permission_name'), 'permission', ['name'], unique=True)

    op.create_table('user_permission',
    sa.Column('user_id', sa.Integer(), nullable=False),
    sa.Column('permission_id', sa.Integer(), nullable=False),
    sa.ForeignKeyConstraint(['permission_id'], ['permission.id'], name=op.f('fk_user_permission_permission_id_permission')),
    sa.ForeignKeyConstraint(['user_id'], ['user.id'], name=op.f('fk_user_permission_user_id_user')),
    sa.PrimaryKeyConstraint('user_id', 'permission_id', name=op.f('pk_user_permission'))
    )

    op.create_table('transaction',
    sa.Column('issued_at', sa.DateTime(), nullable=True),
    sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
    sa.Column('remote_addr', sa.String(length=50), nullable=True),
    sa.Column('user_id', sa.Integer(), nullable=True),
    sa.ForeignKeyConstraint(['user_id'], ['user.id'], name=op.f('fk_transaction_user_id_user')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_transaction'))
    )
    op.create_index(op.f('ix_transaction_user_id'), 'transaction', ['user_id'], unique=False)

    op.create_table('terms',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('start', sa.DateTime(), nullable=False),
    sa.Column('finish', sa.DateTime(), nullable=False),
    sa.Column('description', sa.String(), nullable=True),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_terms'))
    )
    op.create_index(op.f('ix_terms_start'), 'terms', ['start'], unique=False)

    op.create_table('credit_type',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_credit_type'))
    )

    op.create_table('metadata_key',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.Column('allow_multiple', sa.Boolean(), nullable=False),
    sa.Column('description', sa.String(), nullable=True),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_metadata_key'))
    )
    op.create_index(op.f('ix_metadata_key_name'), 'metadata_key', ['name'], unique=True)

    op.create_table('show',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('member_id', sa.Integer(), nullable=False),
    sa.Column('submitted', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['member_id'], ['user.id'], name=op.f('fk_show_member_id_user')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_show'))
    )
    op.create_index(op.f('ix_show_member_id'), 'show', ['member_id'], unique=False)

    op.create_table('show_season',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('show_id', sa.Integer(), nullable=False),
    sa.Column('term_id', sa.Integer(), nullable=False),
    sa.Column('submitted', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['show_id'], ['show.id'], name=op.f('fk_show_season_show_id_show')),
    sa.ForeignKeyConstraint(['term_id'], ['terms.id'], name=op.f('fk_show_season_term_id_terms')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_show_season'))
    )
    op.create_index(op.f('ix_show_season_show_id'), 'show_season', ['show_id'], unique=False)
    op.create_index(op.f('ix_show_season_term_id'), 'show_season', ['term_id'], unique=False)

    op.create_table('show_season_timeslot',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('show_season_id', sa.Integer(), nullable=False),
    sa.Column('start_time', sa.DateTime(), nullable=False),
    sa.Column('end_time', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['show_season_id'], ['show_season.id'], name=op.f('fk_show_season_timeslot_show_season_id_show_season')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_show_season_timeslot'))
    )
    op.create_index(op.f('ix_show_season_timeslot_show_season_id'), 'show_season_timeslot', ['show_season_id'], unique=False)
    op.create_index(op.f('ix_show_season_timeslot_start_time'), 'show_season_timeslot', ['start_time'], unique=False)
    op.create_index(op.f('ix_show_season_timeslot_end_time'), 'show_season_timeslot', ['end_time'], unique=False)

    metadata_table('show_metadata', 'show_id', 'show')
    metadata_table('season_metadata', 'show_season_id', 'show_season')
    metadata_table('timeslot_metadata', 'show_season_timeslot_id', 'show_season_timeslot')

    op.create_table('chart_type',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.Column('description', sa.String(), nullable=False),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_chart_type'))
    )

    op.create_table('chart_type_version',
    sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('name', sa.String(), autoincrement=False, nullable=True),
    sa.Column('description', sa.String(), autoincrement=False, nullable=True),
    sa.Column('transaction_id', sa.BigInteger(), autoincrement=False, nullable=False),
    sa.Column('end_transaction_id', sa.BigInteger(), nullable=True),
    sa.Column('operation_type', sa.SmallInteger(), nullable=False),
    sa.PrimaryKeyConstraint('id', 'transaction_id', name=op.f('pk_chart_type_version'))
    )
    op.create_index(op.f('ix_chart_type_version_end_transaction_id'), 'chart_type_version', ['end_transaction_id'], unique=False)
    op.create_index(op.f('ix_chart_type_version_operation_type'), 'chart_type_version', ['operation_type'], unique=False)
    op.create_index(op.f('ix_chart_type_version_transaction_id'), 'chart_type_version', ['transaction_id'], unique=False)

    op.create_table('chart_release',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('chart_type_id', sa.Integer(), nullable=False),
    sa.Column('submitted', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['chart_type_id'], ['chart_type.id'], name=op.f('fk_chart_release_chart_type_id_chart_type')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_chart_release'))
    )
    op.create_index(op.f('ix_chart_release_chart_type_id'), 'chart_release', ['chart_type_id'], unique=False)
    op.create_index(op.f('ix_chart_release_submitted'), 'chart_release', ['submitted'], unique=False)


def downgrade():
    op.drop_table('chart_release')
    op.drop_table('chart_type_version')
    op.drop_table('chart_type')
    op.drop_table('timeslot_metadata')
    op.drop_table('season_metadata')
    op.drop_table('show_metadata')
    op.drop_table('show_season_timeslot')
    op.drop_table('show_season')
    op.drop_table('show')
    op.drop_table('metadata_key')
    op.drop_table('credit_type')
    op.drop_table('terms')
    op.drop_table('transaction')
    op.drop_table('user_permission')
    op.drop_table('permission')
    op.drop_table('user')
