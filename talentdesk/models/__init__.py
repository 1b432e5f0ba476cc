# Import all models to ensure they're registered with SQLAlchemy
from talentdesk.models.users import User
from talentdesk.models.talents import Talent, TalentTarifs
from talentdesk.models.partners import Partner, PartnerTarifOverride
from talentdesk.models.marques import Marque, MarqueContact
from talentdesk.models.negociations import Negociation, NegoLivrable, NegoCommentaire
from talentdesk.models.collaborations import Collaboration, CollabLivrable
from talentdesk.models.documents import Document, DocumentLigne, DocumentEvent, DocumentComment
from talentdesk.models.notifications import Notification
from talentdesk.models.compteurs import Compteur
