from alembic import op

revision = "0002_donations"
down_revision = "0001_profiles_user_roles"
branch_labels = None
depends_on = None


def upgrade():
    # status stays TEXT: any gateway status string is stored verbatim
    op.execute(
        """
    CREATE TABLE IF NOT EXISTS donations (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      payment_id TEXT NOT NULL,
      name TEXT NOT NULL,
      email TEXT NOT NULL,
      phone TEXT,
      steam_id TEXT,
      amount NUMERIC(12, 2) NOT NULL CHECK (amount > 0),
      description TEXT,
      status TEXT NOT NULL DEFAULT 'pending',
      discount_coupon TEXT,
      qr_code TEXT,
      qr_code_base64 TEXT,
      ticket_url TEXT,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );

    CREATE INDEX IF NOT EXISTS idx_donations_status  ON donations(status, created_at);
    CREATE INDEX IF NOT EXISTS idx_donations_created ON donations(created_at);
    CREATE INDEX IF NOT EXISTS idx_donations_payment ON donations(payment_id);
    """
    )


def downgrade():
    op.execute("DROP TABLE IF EXISTS donations;")
