from pydantic import BaseModel
from typing import Optional


# Company found in the registry, used to prefill a brand's billing profile
class EntrepriseResponse(BaseModel):
    nom_entreprise: Optional[str] = None
    siren: Optional[str] = None
    siret: Optional[str] = None
    numero_tva: Optional[str] = None
    adresse: Optional[str] = None
    code_postal: Optional[str] = None
    ville: Optional[str] = None
    pays: Optional[str] = None
