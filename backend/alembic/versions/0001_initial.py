from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "player",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("nickname", sa.String(), nullable=True),
        sa.Column("department", sa.String(), nullable=True),
        sa.Column("avatar", sa.String(), nullable=True),
        sa.Column(
            "joined_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("rating", sa.Integer(), nullable=False, server_default="300"),
        sa.Column("wins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("draws", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("crawls", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("goals_for", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("goals_against", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tournament_wins", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_player_rating", "player", ["rating"])

    op.create_table(
        "match",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("played_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("context", sa.String(), nullable=False, server_default="daily"),
        sa.Column("tournament_id", sa.String(), nullable=True),
        sa.Column("team_a_ids", sa.JSON(), nullable=False),
        sa.Column("team_b_ids", sa.JSON(), nullable=False),
        sa.Column("score_a", sa.Integer(), nullable=False),
        sa.Column("score_b", sa.Integer(), nullable=False),
        sa.Column("rating_delta_a", sa.Integer(), nullable=False),
        sa.Column("rating_delta_b", sa.Integer(), nullable=False),
        sa.Column("team_a_rating_pre", sa.Float(), nullable=True),
        sa.Column("team_b_rating_pre", sa.Float(), nullable=True),
        sa.Column("expected_score_a", sa.Float(), nullable=True),
    )
    op.create_index("ix_match_played_at", "match", ["played_at"])

    op.create_table(
        "tournament",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="setup"),
        sa.Column("teams", sa.JSON(), nullable=False),
        sa.Column("groups", sa.JSON(), nullable=False),
        sa.Column("bracket", sa.JSON(), nullable=False),
        sa.Column("winner_team_id", sa.String(), nullable=True),
        sa.Column("config", sa.JSON(), nullable=False),
    )


def downgrade():
    op.drop_table("tournament")
    op.drop_index("ix_match_played_at", table_name="match")
    op.drop_table("match")
    op.drop_index("ix_player_rating", table_name="player")
    op.drop_table("player")
