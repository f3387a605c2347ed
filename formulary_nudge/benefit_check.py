"""Simulated real-time benefit check for demos.

This is not a payer integration. Coverage is derived deterministically
from the RxCUI and drug name so that demo screens are stable.
"""

import re
from dataclasses import dataclass

# Biosimilar suffixes and adalimumab biosimilar brands
BIOSIMILAR_SUFFIX_RE = re.compile(r"-atto|-bwwd|-afzb|-szzs|-aafi|-adaz", re.IGNORECASE)
BIOSIMILAR_BRAND_RE = re.compile(r"amjevita|hadlima|hyrimoz|cyltezo|abrilada|idacio")

BIOSIMILAR_COPAY_USD = 10
COVERED_COPAY_USD = 25


@dataclass
class BenefitCheckResult:
    """Simulated coverage and cost share for one drug."""
    rxcui: str
    covered: bool
    formulary_status: str  # covered-preferred, covered, not-covered
    copay_usd: int | None = None

    def to_dict(self) -> dict:
        return {
            "rxcui": self.rxcui,
            "coverage": {
                "covered": self.covered,
                "formularyStatus": self.formulary_status,
            },
            "patientCostShares": {"copayUSD": self.copay_usd},
            "simulated": True,
        }


def is_biosimilar_like(name: str | None) -> bool:
    """Check if a drug name looks like a biosimilar product."""
    text = name or ""
    return bool(
        BIOSIMILAR_SUFFIX_RE.search(text) or BIOSIMILAR_BRAND_RE.search(text.lower())
    )


def simulate_benefit_check(rxcui: str | None, name: str | None = None) -> BenefitCheckResult:
    """Run the demo benefit check for a drug."""
    key = str(rxcui or "")
    last_digit = int(key[-1]) if key and key[-1].isdigit() else 0

    biosimilar = is_biosimilar_like(name)
    covered = biosimilar or last_digit % 2 == 0

    if covered and biosimilar:
        status = "covered-preferred"
        copay = BIOSIMILAR_COPAY_USD
    elif covered:
        status = "covered"
        copay = COVERED_COPAY_USD
    else:
        status = "not-covered"
        copay = None

    return BenefitCheckResult(
        rxcui=key,
        covered=covered,
        formulary_status=status,
        copay_usd=copay,
    )
