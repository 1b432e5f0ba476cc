# Agency identity printed on quotes and invoices
AGENCE_CONFIG = {
    "raison_sociale": "TALENTDESK AGENCY SAS",
    "adresse": "12 rue des Créateurs",
    "code_postal": "13100",
    "ville": "AIX-EN-PROVENCE",
    "pays": "France",
    "capital": 5000,
    "siret": "12345678900012",
    "tva": "FR12123456789",
    "rcs": "123 456 789 R.C.S. Aix-en-Provence",
    "ape": "70.21Z",
    "email": "comptabilite@talentdesk.fr",
    "rib": {
        "iban": "FR76 0000 0000 0000 0000 0000 000",
        "bic": "TALDFRP1XXX",
        "titulaire": "TALENTDESK AGENCY",
    },
    "mentions_penalites": (
        "Taux de pénalité : en cas de retard de paiement, application d'intérêts de 3 fois le taux légal "
        "selon la loi n°2008-776 du 4 août 2008. En cas de retard de paiement, application d'une indemnité "
        "forfaitaire pour frais de recouvrement de 40 euros selon l'article D. 441-5 du code du commerce."
    ),
    "conditions_paiement": "Paiement à 30 jours fin de mois dès réception de la facture",
    "mode_paiement": "Virement bancaire",
}

CGV = """CONDITIONS GÉNÉRALES DE VENTE

Clause n° 1 : Objet et champ d'application
Les présentes conditions générales de vente (CGV) constituent le socle de la négociation commerciale. Toute acceptation du devis emporte l'adhésion sans réserve du client aux présentes conditions.

Clause n° 2 : Prix
Les prix des prestations sont ceux en vigueur au jour de la prise de commande. Ils sont libellés en euros et calculés hors taxes, majorés du taux de TVA applicable au jour de la commande.

Clause n° 3 : Escompte
Aucun escompte ne sera consenti en cas de paiement anticipé.

Clause n° 4 : Modalités de paiement
Le règlement s'effectue uniquement par virement bancaire, dans le délai mentionné sur le document.

Clause n° 5 : Retard de paiement
En cas de défaut de paiement à échéance, le client doit verser une pénalité de retard égale à trois fois le taux de l'intérêt légal, ainsi qu'une indemnité forfaitaire de 40 euros au titre des frais de recouvrement (articles L. 441-10 et D. 441-5 du code de commerce).

Clause n° 6 : Clause résolutoire
Si dans les quinze jours qui suivent la mise en oeuvre de la clause « Retard de paiement » le client ne s'est pas acquitté des sommes dues, la vente sera résolue de plein droit.

Clause n° 7 : Force majeure
La responsabilité de l'agence ne pourra pas être engagée si la non-exécution de l'une de ses obligations découle d'un cas de force majeure.

Clause n° 8 : Protection des données personnelles
L'agence respecte le Règlement Général sur la Protection des Données (RGPD). Le client dispose d'un droit d'accès, de rectification et de suppression de ses données.

Clause n° 9 : Tribunal compétent
Tout litige relatif à l'interprétation et à l'exécution des présentes CGV est soumis au droit français et relève du Tribunal de commerce compétent."""
