"""FastAPI dependency providers for services, stores and model clients.

Routes depend on these rather than building clients themselves so tests can
swap any of them through ``app.dependency_overrides``.
"""

from fastapi import Depends
from supabase import Client

from app.chains.classify_scope import ScopeClassifier
from app.chains.extract_insights import InsightExtractor
from app.chains.generate_brainstorming import BrainstormGenerator
from app.chains.generate_rag_response import ResponseGenerator
from app.chains.generate_title import TitleGenerator
from app.core.config import Settings, get_settings
from app.core.embeddings import EmbeddingClient
from app.core.llm import GenerationClient, get_openai_client
from app.core.retrieval import RetrievalSettings, Retriever
from app.db.knowledge import KnowledgeStore
from app.db.subscribers import SubscriberStore
from app.db.supabase_client import get_supabase
from app.services.chat_service import ChatService
from app.services.knowledge_pipeline import KnowledgePipeline
from app.services.paypal_service import PayPalService
from app.services.subscription_manager import SubscriptionManager


def get_generation_client(settings: Settings = Depends(get_settings)) -> GenerationClient | None:
    client = get_openai_client()
    if client is None:
        return None
    return GenerationClient(
        client,
        model=settings.GENERATION_MODEL,
        temperature=settings.GENERATION_TEMPERATURE,
    )


def get_embedding_client(settings: Settings = Depends(get_settings)) -> EmbeddingClient:
    return EmbeddingClient(
        get_openai_client(),
        model=settings.EMBEDDING_MODEL,
        dimension=settings.EMBEDDING_DIM,
    )


def get_knowledge_store(client: Client = Depends(get_supabase)) -> KnowledgeStore:
    return KnowledgeStore(client)


def get_subscriber_store(client: Client = Depends(get_supabase)) -> SubscriberStore:
    return SubscriberStore(client)


def get_knowledge_pipeline(
    settings: Settings = Depends(get_settings),
    generator: GenerationClient | None = Depends(get_generation_client),
    embedding_client: EmbeddingClient = Depends(get_embedding_client),
    store: KnowledgeStore = Depends(get_knowledge_store),
) -> KnowledgePipeline:
    return KnowledgePipeline(
        classifier=ScopeClassifier(generator, prompt_chars=settings.SCOPE_PROMPT_CHARS),
        extractor=InsightExtractor(generator),
        title_generator=TitleGenerator(generator),
        embedding_client=embedding_client,
        brainstormer=BrainstormGenerator(generator),
        store=store,
        chunk_size=settings.CHUNK_SIZE,
    )


def get_chat_service(
    settings: Settings = Depends(get_settings),
    generator: GenerationClient | None = Depends(get_generation_client),
    embedding_client: EmbeddingClient = Depends(get_embedding_client),
    store: KnowledgeStore = Depends(get_knowledge_store),
) -> ChatService:
    retrieval_settings = RetrievalSettings(
        match_threshold=settings.RAG_MATCH_THRESHOLD,
        match_count=settings.RAG_MATCH_COUNT,
        min_vector_results=settings.RAG_MIN_VECTOR_RESULTS,
        text_result_limit=settings.RAG_TEXT_RESULT_LIMIT,
        recent_limit=settings.RAG_RECENT_LIMIT,
        max_keywords=settings.RAG_MAX_KEYWORDS,
    )
    return ChatService(
        Retriever(store, embedding_client, retrieval_settings),
        ResponseGenerator(generator),
    )


def get_paypal_service(settings: Settings = Depends(get_settings)) -> PayPalService | None:
    if not settings.PAYPAL_CLIENT_ID or not settings.PAYPAL_CLIENT_SECRET:
        return None
    return PayPalService(
        client_id=settings.PAYPAL_CLIENT_ID,
        client_secret=settings.PAYPAL_CLIENT_SECRET,
        base_url=settings.paypal_base_url,
    )


def get_subscription_manager(
    settings: Settings = Depends(get_settings),
    paypal: PayPalService | None = Depends(get_paypal_service),
    subscribers: SubscriberStore = Depends(get_subscriber_store),
) -> SubscriptionManager:
    return SubscriptionManager(
        paypal,
        subscribers,
        webhook_id=settings.PAYPAL_WEBHOOK_ID,
        brand_name=settings.PAYPAL_BRAND_NAME,
        return_base_url=settings.PAYPAL_RETURN_BASE_URL,
    )
