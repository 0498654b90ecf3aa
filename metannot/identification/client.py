"""
Client for an external MS/MS metabolite identification service.

The service receives a precursor m/z and a peak list and answers with a
structured identification. Its internal logic is opaque to metannot; the
client only builds the request and checks the shape of the answer.

You can use it like this
from .client import IdentificationClient, parse_peak_list

client = IdentificationClient("https://example.org/identify", api_key="...")
result = client.identify(301.1234, parse_peak_list(pasted_text))
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

import requests

CONFIDENCE_LEVELS = ('High', 'Medium', 'Low', 'Uncertain')


@dataclass
class Peak:
    mz: float
    intensity: Optional[float] = None


@dataclass
class IdentificationResult:
    compound_name: str
    confidence: str
    reasoning: str
    molecular_formula: Optional[str] = None
    smiles: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IdentificationResult':
        """Build a result from the service's JSON object."""
        missing = [key for key in ('compoundName', 'confidence', 'reasoning') if key not in data]
        if missing:
            raise ValueError(f"Identification response is missing fields: {missing}")

        confidence = str(data['confidence'])
        if confidence not in CONFIDENCE_LEVELS:
            raise ValueError(f"Unknown confidence level '{confidence}', expected one of {CONFIDENCE_LEVELS}")

        return cls(
            compound_name=str(data['compoundName']),
            confidence=confidence,
            reasoning=str(data['reasoning']),
            molecular_formula=data.get('molecularFormula'),
            smiles=data.get('smiles'),
        )


def parse_peak_list(text: str) -> List[Peak]:
    """
    Parse pasted MS/MS peaks, one "mz [intensity]" pair per line.

    Lines whose m/z does not parse are skipped; an unparseable intensity is None.
    """
    peaks = []
    for line in (text or '').strip().splitlines():
        parts = line.split()
        if not parts:
            continue
        try:
            mz = float(parts[0])
        except ValueError:
            continue
        intensity = None
        if len(parts) > 1:
            try:
                intensity = float(parts[1])
            except ValueError:
                intensity = None
        peaks.append(Peak(mz=mz, intensity=intensity))
    return peaks


class IdentificationClient:
    """Posts identification requests to a configured HTTP endpoint."""

    def __init__(self, api_url: str, api_key: str = '', timeout: float = 60):
        if not api_url or not api_url.strip():
            raise ValueError("An API endpoint URL is required for identification")
        self.api_url = api_url.strip()
        self.api_key = api_key
        self.timeout = timeout

    def build_payload(self, precursor_mz: float, peaks: List[Peak]) -> Dict[str, Any]:
        return {
            'apiKey': self.api_key,
            'precursorMz': float(precursor_mz),
            'peaks': [asdict(p) for p in peaks],
        }

    def identify(self, precursor_mz: float, peaks: List[Peak]) -> IdentificationResult:
        """
        Send one identification request.

        Raises:
            ValueError: no peaks, or a malformed response
            requests.HTTPError: the service answered with an error status
        """
        if not peaks:
            raise ValueError("At least one MS/MS peak is required for identification")

        response = requests.post(
            self.api_url,
            json=self.build_payload(precursor_mz, peaks),
            headers={'Content-Type': 'application/json'},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return IdentificationResult.from_dict(response.json())
