"""LLM collaborators (intent resolution, reply phrasing, receipt classification) on the OpenAI Agents SDK."""
import os
import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

# Import from agents SDK
from agents import Agent, Runner, ModelSettings

from models.chat import UNKNOWN_INTENT, Intent, IntentList
from services.taxonomy import CATEGORIES
from utils.json_extract import extract_json, strip_thinking

logger = logging.getLogger(__name__)

if not os.getenv("OPENAI_API_KEY"):
    logger.warning("OPENAI_API_KEY not found or not set in .env file. Chat and receipt classification will degrade.")

APOLOGY_REPLY = "I'm sorry, I couldn't process that information right now."

_CATEGORY_LINES = "\n".join(
    f"- {node.code}: {node.keyword}" + (f" (under {node.parent})" if node.parent else "")
    for node in CATEGORIES
)

INTENT_PROMPT = (
    "You turn a user's question about their own finances into one or more backend operations.\n"
    "Reply with a single JSON object and nothing else:\n"
    '{"intents": [{"intent": "<name>", "parameters": {...}}]}\n'
    "List one intent per distinct question or data point the user asks for.\n\n"
    "Operations and their parameters:\n"
    "- getSpending: month (YYYY-MM), category (optional code)\n"
    "- getBudget: month\n"
    "- getRemainingBudget: month\n"
    "- getSavings: month\n"
    "- getYearlySavings: year (YYYY)\n"
    "- getSavingsSummary: year\n"
    "- getIncome: month\n"
    "- getAllIncome: no parameters\n"
    "- getAllBudgets: no parameters\n"
    "- addEntries: date (YYYY-MM-DD), entries (list of {code, amount, item})\n"
    "- createBudget: month, total, categories ({code: amount})\n"
    "- setIncome: month, total, sources (optional {name: amount})\n"
    "- updateIncome: month, total (optional), sources (optional)\n"
    "- deleteIncome: month\n"
    "- reassignBudget: month, entryId, fromCategory, toCategory, amount\n"
    "- deleteBudget: month\n"
    "- deleteEntries: date (YYYY-MM-DD or YYYY-MM)\n"
    "- deleteEntry: date (YYYY-MM-DD), entryId\n\n"
    "Category codes:\n" + _CATEGORY_LINES + "\n\n"
    "Resolve relative dates ('last month', 'this year') using the date context given with the message; "
    "default to the current month or year when none is stated. "
    f'If the message is not about the user\'s finances, return {{"intents": [{{"intent": "{UNKNOWN_INTENT}", "parameters": {{}}}}]}}.'
)

RECEIPT_PROMPT = (
    "You classify the OCR text of one bill, receipt or invoice into spending entries.\n"
    "Reply with a single JSON object and nothing else:\n"
    '{"entries": [{"code": "...", "amount": 0.0, "item": "...", "name": "YYYY-MM Keyword", "confidence": 0.0}], '
    '"confidence_overall": 0.0, "reason": "..."}\n'
    "Use one entry when at least 80% of the bill belongs to one category, otherwise one entry per category. "
    "Amounts are plain numbers without currency symbols or thousands separators. "
    "Use MIS for anything below 0.6 confidence. confidence_overall is the lowest entry confidence. "
    "name is the bill's month (today's when the bill has no date) followed by the category keyword.\n\n"
    "Category codes and keywords:\n" + _CATEGORY_LINES
)

RESPONDER_PROMPT = "You are a helpful personal finance assistant. Never include <think> tags or internal reasoning."


def _unknown() -> List[Dict[str, Any]]:
    return [{"intent": UNKNOWN_INTENT, "parameters": {}}]


def parse_intents(content: Optional[str]) -> List[Dict[str, Any]]:
    """Decodes the intent resolver's raw output, accepting the legacy single-intent shape."""
    payload = extract_json(content)
    if payload is None:
        return _unknown()
    try:
        if isinstance(payload.get("intents"), list):
            return [i.model_dump() for i in IntentList.model_validate(payload).intents]
        if payload.get("intent"):
            return [Intent.model_validate(payload).model_dump()]
    except ValidationError as e:
        logger.warning(f"Intent payload did not match the expected shape: {e}")
    return _unknown()


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


class AgentAssistant:
    """Production implementation of the chat and receipt LLM contracts."""

    def __init__(self, model: str = "gpt-4o-mini"):
        self.intent_agent = Agent(
            name="IntentResolver",
            instructions=INTENT_PROMPT,
            model=model,
            model_settings=ModelSettings(temperature=0),
        )
        self.responder_agent = Agent(
            name="FinanceResponder",
            instructions=RESPONDER_PROMPT,
            model=model,
            model_settings=ModelSettings(temperature=0.7),
        )
        self.receipt_agent = Agent(
            name="ReceiptClassifier",
            instructions=RECEIPT_PROMPT,
            model=model,
            model_settings=ModelSettings(temperature=0),
        )

    async def _run(self, agent: Agent, text: str) -> str:
        result = await Runner.run(agent, input=text)
        return str(result.final_output or "")

    async def resolve_intents(self, message: str, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """Never raises; total failure yields the single 'unknown' intent."""
        today = today or date.today()
        context = (
            f"Today is {today.isoformat()}. Current month is {today:%Y-%m}. Current year is {today.year}.\n"
            f"User message: {message}"
        )
        try:
            content = await self._run(self.intent_agent, context)
        except Exception as e:
            logger.exception(f"Intent extraction failed: {e}")
            return _unknown()
        logger.info("LLM intent response received")
        return parse_intents(content)

    async def phrase_single(self, question: str, data: Any) -> str:
        prompt = (
            f'Given the user asked: "{question}"\n\n'
            f"And the system retrieved this data: {_dump(data)}\n\n"
            "Write a concise, helpful reply of one or two sentences that answers the question directly "
            "with the relevant numbers. If the data holds an error or nothing was found, politely explain what went wrong."
        )
        return await self._phrase(prompt)

    async def phrase_multi(self, question: str, results: List[Dict[str, Any]]) -> str:
        sources = "\n".join(
            f"SOURCE {i}: {_dump(r['data'])}\nFROM OPERATION: {r['intent']['intent']} "
            f"with parameters {_dump(r['intent'].get('parameters', {}))}"
            for i, r in enumerate(results, start=1)
        )
        prompt = (
            f'Given the user asked: "{question}"\n\n'
            f"And the system retrieved this data from several operations:\n{sources}\n\n"
            "Write a concise, helpful reply that addresses every part of the question, organised clearly. "
            "For any part that failed or has no data, politely explain what went wrong."
        )
        return await self._phrase(prompt)

    async def _phrase(self, prompt: str) -> str:
        try:
            reply = strip_thinking(await self._run(self.responder_agent, prompt))
        except Exception as e:
            logger.exception(f"Response generation failed: {e}")
            return APOLOGY_REPLY
        return reply or APOLOGY_REPLY

    async def classify_receipt(self, text: str) -> Optional[Dict[str, Any]]:
        """Raw classifier payload, or None when the model output holds no JSON object."""
        logger.info(f"Classifying receipt text (length: {len(text)} chars)...")
        content = await self._run(self.receipt_agent, text)
        return extract_json(content)
