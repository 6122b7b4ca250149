"""Schedule fetcher querying the generative data provider"""
import asyncio
from datetime import date
from typing import Any, List, Optional

from ..errors import ParseError
from ..utils.logger import setup_logger
from .gemini_client import GeminiClient
from .prompt_builder import build_schedule_prompt
from .response_decoder import FreeTextArrayDecoder, ResponseDecoder

logger = setup_logger(__name__)


class ScheduleFetcher:
    """Fetcher for one airport's arrivals on a given date"""

    def __init__(
        self,
        client: GeminiClient,
        airport_code: str,
        airport_name: str,
        decoder: Optional[ResponseDecoder] = None
    ):
        """
        Initialize schedule fetcher

        Args:
            client: Provider client with a blocking generate(prompt) -> str
            airport_code: IATA code of the airport
            airport_name: Name used in the request
            decoder: Response decoder, defaults to the tolerant free-text one
        """
        self.client = client
        self.airport_code = airport_code
        self.airport_name = airport_name
        self.decoder = decoder or FreeTextArrayDecoder()

    async def fetch_records(self, target_date: date) -> List[Any]:
        """
        Fetch the raw arrival records for a date

        One provider call, no retry. Errors propagate to the caller.

        Args:
            target_date: Calendar date to fetch

        Returns:
            Loosely typed records, in provider order
        """
        prompt = build_schedule_prompt(self.airport_code, self.airport_name, target_date)

        logger.debug(f"Fetching arrivals for {self.airport_code} on {target_date.isoformat()}")
        text = await asyncio.to_thread(self.client.generate, prompt)

        records = self.decoder.decode(text)
        if not isinstance(records, list):
            raise ParseError("Provider response is not a JSON array", raw_text=text)

        logger.info(f"Received {len(records)} records for {target_date.isoformat()}")
        return records
