"""
Transaction extraction using the LLM with structured output.
Runs prompt rendering, the chat call, JSON recovery and schema validation.
"""
from core.logger import setup_logger
from core.parsing import parse_model_json
from core.schema import Catalog, ExtractedTransaction, validate_extraction
from llm.client import OllamaClientWrapper, create_response_schema
from llm.prompts import build_extraction_prompt

logger = setup_logger(__name__)


def extract_transaction(
    client: OllamaClientWrapper,
    sms: str,
    catalog: Catalog,
) -> ExtractedTransaction:
    """
    Extract structured transaction fields from one SMS.

    Args:
        client: Ollama client
        sms: Raw SMS text
        catalog: Current account/category catalog

    Returns:
        Validated ExtractedTransaction

    Raises:
        GatewayError: If the inference call fails
        ExtractionError: If no JSON object is found in the model text
        ValidationError: If the object violates the schema
    """
    prompt = build_extraction_prompt(sms, catalog)

    content = client.chat(
        prompt=prompt,
        response_schema=create_response_schema(),
        temperature=0.0,
    )

    extracted = validate_extraction(parse_model_json(content))
    logger.info(
        f"Extracted amount={extracted.amount} account={extracted.account_label!r} "
        f"category={extracted.category_label!r}"
    )
    return extracted
