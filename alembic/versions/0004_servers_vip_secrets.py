from alembic import op

revision = "0004_servers_vip_secrets"
down_revision = "0003_streamers_coupons"
branch_labels = None
depends_on = None


def upgrade():
    op.execute(
        """
    CREATE TABLE IF NOT EXISTS servidores (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      nome TEXT NOT NULL,
      host TEXT NOT NULL,
      valor_mensal NUMERIC(12, 2) NOT NULL DEFAULT 0 CHECK (valor_mensal >= 0),
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );

    CREATE TABLE IF NOT EXISTS servidores_mods (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      servidor_id UUID NOT NULL REFERENCES servidores(id),
      nome_mod TEXT NOT NULL,
      discord TEXT,
      loja_steam TEXT,
      valor_mensal NUMERIC(12, 2) NOT NULL DEFAULT 0 CHECK (valor_mensal >= 0),
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    CREATE INDEX IF NOT EXISTS idx_servidores_mods_servidor
      ON servidores_mods (servidor_id);

    CREATE TABLE IF NOT EXISTS vip_packages (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      nome TEXT NOT NULL,
      descricao TEXT,
      valor NUMERIC(12, 2) NOT NULL CHECK (valor > 0),
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );

    CREATE TABLE IF NOT EXISTS app_secrets (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      key TEXT NOT NULL UNIQUE,
      value TEXT,
      description TEXT,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );

    INSERT INTO app_secrets (key, value, description) VALUES
      ('MERCADO_PAGO_ACCESS_TOKEN', NULL, 'Mercado Pago access token'),
      ('RESEND_API_KEY', NULL, 'Resend API key'),
      ('SENDGRID_API_KEY', NULL, 'SendGrid API key (EMAIL_PROVIDER=sendgrid)'),
      ('COUPON_MIN_AMOUNT', NULL, 'Minimum donation for any coupon (BRL)'),
      ('PIX_MARKUP_PERCENT', NULL, 'Percentage added to the final PIX amount')
    ON CONFLICT (key) DO NOTHING;
    """
    )


def downgrade():
    op.execute(
        """
    DROP TABLE IF EXISTS app_secrets;
    DROP TABLE IF EXISTS vip_packages;
    DROP TABLE IF EXISTS servidores_mods;
    DROP TABLE IF EXISTS servidores;
    """
    )
