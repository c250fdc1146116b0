# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# accounts doit précéder les autres tables (toutes y référencent un compte).

from app.models.account import Account, AccountRole  # noqa: F401
from app.models.tutor_profile import TutorProfile  # noqa: F401
from app.models.offer import Offer  # noqa: F401
from app.models.application import Application  # noqa: F401
from app.models.contract import Contract  # noqa: F401
