# migrations/versions/20260301_0001_initial_schema.py
"""profiles, events, coa_requests, certificates, artist_requests, refresh_tokens

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-03-01
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _created_at():
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade():
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(160), nullable=False),
        sa.Column("full_name", sa.String(160), nullable=True),
        sa.Column("role", sa.String(20), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        _created_at(),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=True)
    op.create_index("ix_profiles_role", "profiles", ["role"])

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("artist_user_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("artist_name", sa.String(160), nullable=False),
        sa.Column("event_name", sa.String(200), nullable=False),
        sa.Column("event_location", sa.String(200), nullable=True),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("event_end_date", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.CheckConstraint("event_end_date IS NULL OR event_end_date >= event_date", name="event_dates_order"),
    )
    op.create_index("ix_events_slug", "events", ["slug"], unique=True)
    op.create_index("ix_events_artist_user_id", "events", ["artist_user_id"])

    # issued_coa_id ganha a FK depois que certificates existir (ciclo)
    op.create_table(
        "coa_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("comic_title", sa.String(200), nullable=False),
        sa.Column("issue_number", sa.String(40), nullable=False),
        sa.Column("collector_user_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="SET NULL"), nullable=True),
        sa.Column("attested", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("witness_name", sa.String(160), nullable=True),
        sa.Column("proof_image_path", sa.String(255), nullable=True),
        sa.Column("book_image_path", sa.String(255), nullable=True),
        sa.Column("book_image_url", sa.String(500), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("issued_coa_id", sa.Integer(), nullable=True),
        sa.Column("reviewed_by", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_coa_requests_status", "coa_requests", ["status"])
    op.create_index("ix_coa_requests_collector_user_id", "coa_requests", ["collector_user_id"])
    op.create_index("ix_coa_requests_event_id", "coa_requests", ["event_id"])

    op.create_table(
        "certificates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("qr_id", sa.String(64), nullable=False),
        sa.Column("serial_number", sa.String(64), nullable=True),
        sa.Column("comic_title", sa.String(200), nullable=False),
        sa.Column("issue_number", sa.String(40), nullable=False),
        sa.Column("signed_by", sa.String(160), nullable=False),
        sa.Column("signed_date", sa.Date(), nullable=True),
        sa.Column("signed_location", sa.String(200), nullable=True),
        sa.Column("witnessed_by", sa.String(160), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("request_id", sa.Integer(), sa.ForeignKey("coa_requests.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("serial_number", name="uq_certificates_serial_number"),
        # no máximo um certificado por pedido
        sa.UniqueConstraint("request_id", name="uq_certificates_request_id"),
    )
    op.create_index("ix_certificates_qr_id", "certificates", ["qr_id"], unique=True)

    with op.batch_alter_table("coa_requests") as batch:
        batch.create_foreign_key(
            "fk_coa_requests_issued_coa_id_certificates",
            "certificates", ["issued_coa_id"], ["id"], ondelete="SET NULL",
        )

    op.create_table(
        "artist_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("full_name", sa.String(160), nullable=True),
        sa.Column("portfolio_url", sa.String(500), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("reviewed_by", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_artist_requests_user_id", "artist_requests", ["user_id"])
    op.create_index("ix_artist_requests_status", "artist_requests", ["status"])

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("jti", sa.String(64), nullable=False),
        sa.Column("profile_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_refresh_tokens_jti", "refresh_tokens", ["jti"], unique=True)
    op.create_index("ix_refresh_tokens_profile_id", "refresh_tokens", ["profile_id"])


def downgrade():
    op.drop_table("refresh_tokens")
    op.drop_table("artist_requests")
    with op.batch_alter_table("coa_requests") as batch:
        batch.drop_constraint("fk_coa_requests_issued_coa_id_certificates", type_="foreignkey")
    op.drop_table("certificates")
    op.drop_table("coa_requests")
    op.drop_table("events")
    op.drop_table("profiles")
