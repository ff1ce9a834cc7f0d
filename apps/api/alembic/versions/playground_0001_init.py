"""playground_0001_init

Create schema and tables:
- playground.users
- playground.playgrounds
- playground.ratings
- playground.favorites
- playground.user_photos
"""

from alembic import op

revision = "playground_0001"
down_revision = None
branch_labels = ("playground",)
depends_on = None


def upgrade() -> None:
    op.execute("CREATE SCHEMA IF NOT EXISTS playground")
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS playground.users (
          id VARCHAR(255) PRIMARY KEY,
          email VARCHAR(255),
          name VARCHAR(255) NOT NULL,
          avatar_url TEXT,
          created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
          updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        """
    )
    op.execute("CREATE INDEX IF NOT EXISTS idx_playground_users_email ON playground.users (email)")
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS playground.playgrounds (
          id VARCHAR(64) PRIMARY KEY,
          name VARCHAR(255) NOT NULL,
          location VARCHAR(255),
          description TEXT,
          age_range VARCHAR(64),
          accessibility TEXT,
          opening_hours VARCHAR(255),
          equipment JSON NOT NULL DEFAULT '[]',
          facilities JSON NOT NULL DEFAULT '[]',
          lat DOUBLE PRECISION,
          lng DOUBLE PRECISION,
          created_by VARCHAR(255) NOT NULL,
          created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
          updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        """
    )
    op.execute("CREATE INDEX IF NOT EXISTS idx_playgrounds_name ON playground.playgrounds (name)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_playgrounds_lat ON playground.playgrounds (lat)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_playgrounds_lng ON playground.playgrounds (lng)")
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS playground.ratings (
          user_id VARCHAR(255) NOT NULL,
          playground_id VARCHAR(64) NOT NULL REFERENCES playground.playgrounds (id) ON DELETE CASCADE,
          category VARCHAR(64) NOT NULL,
          score INTEGER NOT NULL CHECK (score BETWEEN 1 AND 5),
          review TEXT,
          created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
          updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
          PRIMARY KEY (user_id, playground_id, category)
        )
        """
    )
    op.execute("CREATE INDEX IF NOT EXISTS idx_ratings_playground ON playground.ratings (playground_id)")
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS playground.favorites (
          user_id VARCHAR(255) NOT NULL,
          playground_id VARCHAR(64) NOT NULL REFERENCES playground.playgrounds (id) ON DELETE CASCADE,
          created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
          PRIMARY KEY (user_id, playground_id)
        )
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS playground.user_photos (
          id VARCHAR(64) PRIMARY KEY,
          user_id VARCHAR(255) NOT NULL,
          playground_id VARCHAR(64) NOT NULL,
          storage_key VARCHAR(512) NOT NULL UNIQUE,
          public_url TEXT NOT NULL,
          content_type VARCHAR(64) NOT NULL,
          size_bytes INTEGER NOT NULL,
          created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        """
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_user_photos_owner "
        "ON playground.user_photos (user_id, playground_id)"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS playground.user_photos")
    op.execute("DROP TABLE IF EXISTS playground.favorites")
    op.execute("DROP TABLE IF EXISTS playground.ratings")
    op.execute("DROP TABLE IF EXISTS playground.playgrounds")
    op.execute("DROP TABLE IF EXISTS playground.users")
