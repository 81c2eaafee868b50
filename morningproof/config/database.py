from dotenv import load_dotenv
from supabase._async.client import create_client as create_async_client, AsyncClient
from morningproof.config.settings import get_settings

# Load environment variables
load_dotenv()

async def get_async_supabase_client() -> AsyncClient:
    """
    Initialize and return an async Supabase client using the service key.

    Returns:
        AsyncClient: A configured async Supabase client

    Raises:
        ValueError: If required environment variables are not set
    """
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError(
            "Supabase configuration not found. Please set SUPABASE_URL and SUPABASE_SERVICE_KEY environment variables."
        )

    client = await create_async_client(
        supabase_url=settings.supabase_url,
        supabase_key=settings.supabase_service_key
    )
    return client
