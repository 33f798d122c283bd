#!/usr/bin/env python3
"""
Seed database with an admin account and sample catalog data.

Usage: python scripts/seed.py [--force]
Requires: migrations applied (alembic upgrade head)

Env: SEED_ADMIN_EMAIL (default admin@setor7.local),
     SEED_ADMIN_PASSWORD (default setor7admin),
     MERCADO_PAGO_ACCESS_TOKEN / RESEND_API_KEY (optional, copied into app_secrets)
"""
import os
import sys

# Ensure app is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.models.app_secret import upsert_secret
from app.services.auth_service import hash_password
from app.utils.db import get_db_connection

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@setor7.local")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "setor7admin")


def seed():
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("SELECT COUNT(*) FROM profiles WHERE email = %s", (ADMIN_EMAIL,))
        if cur.fetchone()[0] > 0:
            print(f"Already seeded ({ADMIN_EMAIL} exists). Use --force to re-seed.")
            return

        # 1. Admin user
        cur.execute(
            """
            INSERT INTO profiles (email, password_hash, full_name)
            VALUES (%s, %s, 'Admin Setor 7')
            RETURNING id
            """,
            (ADMIN_EMAIL, hash_password(ADMIN_PASSWORD)),
        )
        user_id = cur.fetchone()[0]
        cur.execute(
            "INSERT INTO user_roles (user_id, role) VALUES (%s, 'admin')", (user_id,)
        )

        # 2. VIP packages
        cur.execute(
            """
            INSERT INTO vip_packages (nome, descricao, valor)
            VALUES
                ('VIP Bronze', 'Kit inicial + prioridade na fila', 20.00),
                ('VIP Prata', 'Kit intermediário + 2 slots de base', 50.00),
                ('VIP Ouro', 'Kit completo + 4 slots de base', 100.00)
            """
        )

        # 3. Streamer with a percentage coupon valid for 30 days
        cur.execute(
            """
            INSERT INTO streamers (nome, steam_id, youtube)
            VALUES ('Streamer X', '76561198000000000', 'https://youtube.com/@streamerx')
            RETURNING id
            """
        )
        streamer_id = cur.fetchone()[0]
        cur.execute(
            """
            INSERT INTO streamer_coupons
                (streamer_id, nome, codigo, descricao, data_inicio, data_fim, porcentagem)
            VALUES (%s, 'Cupom Streamer X', 'STREAMERX', '20%% de desconto',
                    now(), now() + interval '30 days', 20)
            """,
            (streamer_id,),
        )

        # 4. Global coupon and one server with a mod
        cur.execute(
            """
            INSERT INTO discount_coupons (code, discount_percentage, active)
            VALUES ('BEMVINDO10', 10, true)
            ON CONFLICT DO NOTHING
            """
        )
        cur.execute(
            """
            INSERT INTO servidores (nome, host, valor_mensal)
            VALUES ('Setor 7 Hardcore PVE', 'play.setor7.local:2302', 150.00)
            RETURNING id
            """
        )
        server_id = cur.fetchone()[0]
        cur.execute(
            """
            INSERT INTO servidores_mods (servidor_id, nome_mod, valor_mensal)
            VALUES (%s, 'Base Building Plus', 15.00)
            """,
            (server_id,),
        )
        conn.commit()

    # 5. Secrets from env, when given
    for key in ("MERCADO_PAGO_ACCESS_TOKEN", "RESEND_API_KEY"):
        if os.getenv(key):
            upsert_secret(key, os.getenv(key))

    print("Seeded successfully.")
    print(f"  Admin user: {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
    print("  VIP packages: 3")
    print("  Coupons: STREAMERX (20%, streamer), BEMVINDO10 (10%, global)")
    print("  Servers: 1 with 1 mod")


def force_seed():
    """Clear seeded data and re-seed. Use with caution."""
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM streamers WHERE nome = 'Streamer X'")
        cur.execute("DELETE FROM discount_coupons WHERE code = 'BEMVINDO10'")
        cur.execute(
            """
            DELETE FROM servidores_mods WHERE servidor_id IN (
                SELECT id FROM servidores WHERE nome = 'Setor 7 Hardcore PVE'
            )
            """
        )
        cur.execute("DELETE FROM servidores WHERE nome = 'Setor 7 Hardcore PVE'")
        cur.execute("DELETE FROM vip_packages WHERE nome LIKE 'VIP %%'")
        cur.execute("DELETE FROM profiles WHERE email = %s", (ADMIN_EMAIL,))
        conn.commit()
    print("Cleared seeded data. Seeding...")
    seed()


if __name__ == "__main__":
    if "--force" in sys.argv:
        force_seed()
    else:
        seed()
