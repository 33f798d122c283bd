from alembic import op

revision = "0003_streamers_coupons"
down_revision = "0002_donations"
branch_labels = None
depends_on = None


def upgrade():
    op.execute(
        """
    CREATE TABLE IF NOT EXISTS discount_coupons (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      code TEXT NOT NULL,
      discount_percentage NUMERIC(5, 2) NOT NULL
        CHECK (discount_percentage > 0 AND discount_percentage <= 100),
      active BOOLEAN NOT NULL DEFAULT true,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    CREATE UNIQUE INDEX IF NOT EXISTS uq_discount_coupons_code
      ON discount_coupons (UPPER(code));

    CREATE TABLE IF NOT EXISTS streamers (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      nome TEXT NOT NULL,
      email TEXT,
      telefone TEXT,
      steam_id TEXT,
      youtube TEXT,
      instagram TEXT,
      facebook TEXT,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );

    CREATE TABLE IF NOT EXISTS streamer_coupons (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      streamer_id UUID NOT NULL REFERENCES streamers(id) ON DELETE CASCADE,
      nome TEXT NOT NULL,
      codigo TEXT NOT NULL,
      descricao TEXT,
      data_inicio TIMESTAMPTZ NOT NULL,
      data_fim TIMESTAMPTZ NOT NULL,
      valor NUMERIC(12, 2) CHECK (valor > 0),
      porcentagem NUMERIC(5, 2) CHECK (porcentagem > 0 AND porcentagem <= 100),
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      CONSTRAINT streamer_coupons_one_discount
        CHECK ((valor IS NULL) <> (porcentagem IS NULL)),
      CONSTRAINT streamer_coupons_window CHECK (data_fim >= data_inicio)
    );
    CREATE UNIQUE INDEX IF NOT EXISTS uq_streamer_coupons_codigo
      ON streamer_coupons (UPPER(codigo));
    CREATE INDEX IF NOT EXISTS idx_streamer_coupons_streamer
      ON streamer_coupons (streamer_id);

    CREATE TABLE IF NOT EXISTS streamer_campanhas (
      id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
      streamer_id UUID NOT NULL REFERENCES streamers(id) ON DELETE CASCADE,
      nome TEXT NOT NULL,
      descricao TEXT,
      data_inicio TIMESTAMPTZ NOT NULL,
      data_fim TIMESTAMPTZ NOT NULL,
      valor NUMERIC(12, 2) NOT NULL CHECK (valor > 0),
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      CONSTRAINT streamer_campanhas_window CHECK (data_fim > data_inicio)
    );
    CREATE INDEX IF NOT EXISTS idx_streamer_campanhas_inicio
      ON streamer_campanhas (data_inicio);
    """
    )


def downgrade():
    op.execute(
        """
    DROP TABLE IF EXISTS streamer_campanhas;
    DROP TABLE IF EXISTS streamer_coupons;
    DROP TABLE IF EXISTS streamers;
    DROP TABLE IF EXISTS discount_coupons;
    """
    )
