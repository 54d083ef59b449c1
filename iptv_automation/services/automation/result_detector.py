"""
Provisioning result detection logic

The panel gives no structured response after a form submit, so the rendered
page text is scanned for markers. The verdict is a heuristic, not proof.
"""

from typing import Optional

from ...models.provisioning import Outcome, OutcomeKind


class ProvisioningResultDetector:
    """Classifies post-submit page text"""

    POSITIVE_MARKERS = [
        "success",
        "created",
        "added",
        "updated",
        "extended",
        "saved",
    ]

    NEGATIVE_MARKERS = [
        "error",
        "exists",
        "duplicate",
    ]

    @staticmethod
    def classify_outcome(page_text: str, username: Optional[str] = None) -> Outcome:
        """
        Classify the page text shown after submitting a form

        Args:
            page_text: Visible text of the page
            username: Line username; its presence in the text counts as a positive marker

        Returns:
            SUCCESS when any positive marker is present, FAILURE when only a
            negative marker is present, INCONCLUSIVE otherwise
        """
        text = (page_text or "").lower()

        positives = list(ProvisioningResultDetector.POSITIVE_MARKERS)
        if username:
            positives.append(username.lower())

        for marker in positives:
            if marker in text:
                return Outcome(OutcomeKind.SUCCESS, marker)

        for marker in ProvisioningResultDetector.NEGATIVE_MARKERS:
            if marker in text:
                return Outcome(OutcomeKind.FAILURE, marker)

        return Outcome(OutcomeKind.INCONCLUSIVE)


classify_outcome = ProvisioningResultDetector.classify_outcome
