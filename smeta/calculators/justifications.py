"""
Regulatory citations attached to calculation results. Fixed reference text, keyed by branch.
"""

from ..models import Justification

GESN_SCAFFOLDING_TITLE = "ГЭСН 81-02-08-2022, п. 2.8.27"

GESN_SCAFFOLDING_TEXT = (
    "«...установка и разборка наружных инвентарных лесов исчисляется по площади "
    "вертикальной проекции их на фасад здания, внутренних — по горизонтальной проекции "
    "на основание. Если внутренние леса устанавливаются только для отделки стен (вдоль стен) "
    "и не имеют сплошного настила по всему помещению для отделки потолка, то их площадь "
    "исчисляется по длине стен, умноженной на ширину настила лесов.»"
)

JUSTIFICATIONS = {
    "outside": Justification(
        title=GESN_SCAFFOLDING_TITLE,
        text=(
            "«...установка и разборка наружных инвентарных лесов исчисляется по площади "
            "вертикальной проекции их на фасад здания...»"
        ),
    ),
    "ceiling": Justification(
        title=GESN_SCAFFOLDING_TITLE,
        text=(
            "«...установка и разборка внутренних инвентарных лесов исчисляется "
            "по горизонтальной проекции на основание...»"
        ),
    ),
    "walls": Justification(
        title=GESN_SCAFFOLDING_TITLE,
        text=(
            "«...Если внутренние леса устанавливаются только для отделки стен (вдоль стен) "
            "и не имеют сплошного настила по всему помещению для отделки потолка, то их "
            "площадь исчисляется по длине стен, умноженной на ширину настила лесов.»"
        ),
    ),
}

GENERAL = Justification(title=GESN_SCAFFOLDING_TITLE, text=GESN_SCAFFOLDING_TEXT)


def justification_for(branch: str) -> Justification:
    """Citation for a branch; the full clause when the branch is not recognized."""
    return JUSTIFICATIONS.get(branch, GENERAL)
