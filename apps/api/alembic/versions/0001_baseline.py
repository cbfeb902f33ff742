"""Baseline migration - helpdesk tenants, tickets, notifications, jobs, knowledge

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

Creates every table the helpdesk API owns plus the pgvector-backed
knowledge base and its `match_knowledge_base` similarity function.
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


EMBEDDING_DIMENSIONS = 1536


def upgrade() -> None:
    """Create helpdesk tables."""

    # ==========================================================================
    # Enable required extensions
    # ==========================================================================
    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')  # For gen_random_uuid()
    op.execute('CREATE EXTENSION IF NOT EXISTS vector')    # Knowledge base embeddings

    # ==========================================================================
    # Organizations, user profiles, teams
    # ==========================================================================
    op.execute('''
        CREATE TABLE organizations (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(255) NOT NULL,
            slug VARCHAR(100) UNIQUE NOT NULL,
            ai_enabled BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')

    op.execute('''
        CREATE TABLE user_profiles (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            email VARCHAR(255) NOT NULL,
            display_name VARCHAR(255),
            role VARCHAR(20) NOT NULL DEFAULT 'customer',
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_user_profiles_org ON user_profiles(organization_id)')

    op.execute('''
        CREATE TABLE support_teams (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            name VARCHAR(255) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')

    # ==========================================================================
    # Tickets and messages
    # ==========================================================================
    op.execute('''
        CREATE TABLE support_tickets (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            title VARCHAR(255) NOT NULL,
            description TEXT,
            status VARCHAR(30) NOT NULL DEFAULT 'open',
            priority VARCHAR(20) NOT NULL DEFAULT 'normal',
            created_by_user_id UUID REFERENCES user_profiles(id) ON DELETE SET NULL,
            assigned_to_user_id UUID REFERENCES user_profiles(id) ON DELETE SET NULL,
            assigned_to_team_id UUID REFERENCES support_teams(id) ON DELETE SET NULL,
            version INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_support_tickets_org_status ON support_tickets(organization_id, status)')
    op.execute('CREATE INDEX idx_support_tickets_org_created ON support_tickets(organization_id, created_at)')

    op.execute('''
        CREATE TABLE ticket_messages (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            ticket_id UUID NOT NULL REFERENCES support_tickets(id) ON DELETE CASCADE,
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            sender_user_id UUID REFERENCES user_profiles(id) ON DELETE SET NULL,
            content TEXT NOT NULL,
            is_internal_note BOOLEAN NOT NULL DEFAULT false,
            is_ai_generated BOOLEAN NOT NULL DEFAULT false,
            agent_has_read BOOLEAN NOT NULL DEFAULT false,
            customer_has_read BOOLEAN NOT NULL DEFAULT false,
            attached_file_ids JSONB NOT NULL DEFAULT '[]'::jsonb,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_ticket_messages_ticket_created ON ticket_messages(ticket_id, created_at)')

    # ==========================================================================
    # Notifications (staff-facing, org scoped)
    # ==========================================================================
    op.execute('''
        CREATE TABLE notifications (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            notification_type VARCHAR(50) NOT NULL,
            entity_type VARCHAR(50),
            entity_id UUID,
            title VARCHAR(255) NOT NULL,
            content TEXT,
            read_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_notif_org_created ON notifications(organization_id, created_at)')
    op.execute('CREATE INDEX idx_notif_entity ON notifications(entity_type, entity_id)')

    # ==========================================================================
    # Background jobs
    # ==========================================================================
    op.execute('''
        CREATE TABLE jobs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            job_type VARCHAR(50) NOT NULL,
            payload JSONB NOT NULL DEFAULT '{}'::jsonb,
            result JSONB,
            run_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            status VARCHAR(20) NOT NULL DEFAULT 'pending',
            attempts INTEGER NOT NULL DEFAULT 0,
            max_attempts INTEGER NOT NULL DEFAULT 3,
            last_error TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            started_at TIMESTAMPTZ,
            completed_at TIMESTAMPTZ,
            idempotency_key VARCHAR(255)
        )
    ''')
    op.execute('CREATE INDEX idx_jobs_pending ON jobs(status, run_at)')
    op.execute('CREATE INDEX idx_jobs_org ON jobs(organization_id, created_at)')
    op.execute('CREATE UNIQUE INDEX uq_job_idempotency ON jobs(idempotency_key)')

    # ==========================================================================
    # Knowledge base embeddings
    # ==========================================================================
    op.execute(f'''
        CREATE TABLE knowledge_base_embeddings (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            source_type VARCHAR(20) NOT NULL,
            source_id VARCHAR(255) NOT NULL,
            chunk_index INTEGER NOT NULL DEFAULT 0,
            content TEXT NOT NULL,
            content_embedding VECTOR({EMBEDDING_DIMENSIONS}) NOT NULL,
            metadata JSONB NOT NULL DEFAULT '{{}}'::jsonb,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_kb_embeddings_org ON knowledge_base_embeddings(organization_id)')
    op.execute('CREATE INDEX idx_kb_embeddings_source ON knowledge_base_embeddings(source_type, source_id)')
    op.execute('''
        CREATE INDEX idx_kb_embeddings_vector ON knowledge_base_embeddings
        USING hnsw (content_embedding vector_cosine_ops)
    ''')

    # Cosine similarity search scoped to one organization, best match first.
    op.execute(f'''
        CREATE OR REPLACE FUNCTION match_knowledge_base(
            query_embedding VECTOR({EMBEDDING_DIMENSIONS}),
            match_threshold FLOAT,
            match_count INT,
            organization_id UUID
        )
        RETURNS TABLE (
            source_type VARCHAR,
            source_id VARCHAR,
            content TEXT,
            metadata JSONB,
            similarity FLOAT
        )
        LANGUAGE sql STABLE
        AS $$
            SELECT
                kb.source_type,
                kb.source_id,
                kb.content,
                kb.metadata,
                1 - (kb.content_embedding <=> query_embedding) AS similarity
            FROM knowledge_base_embeddings kb
            WHERE kb.organization_id = match_knowledge_base.organization_id
              AND 1 - (kb.content_embedding <=> query_embedding) >= match_threshold
            ORDER BY kb.content_embedding <=> query_embedding
            LIMIT match_count
        $$
    ''')


def downgrade() -> None:
    """Drop helpdesk tables."""
    op.execute('DROP FUNCTION IF EXISTS match_knowledge_base(VECTOR, FLOAT, INT, UUID)')
    op.execute('DROP TABLE IF EXISTS knowledge_base_embeddings CASCADE')
    op.execute('DROP TABLE IF EXISTS jobs CASCADE')
    op.execute('DROP TABLE IF EXISTS notifications CASCADE')
    op.execute('DROP TABLE IF EXISTS ticket_messages CASCADE')
    op.execute('DROP TABLE IF EXISTS support_tickets CASCADE')
    op.execute('DROP TABLE IF EXISTS support_teams CASCADE')
    op.execute('DROP TABLE IF EXISTS user_profiles CASCADE')
    op.execute('DROP TABLE IF EXISTS organizations CASCADE')
