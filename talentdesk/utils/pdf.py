import logging
import os
import tempfile
from datetime import datetime
from decimal import Decimal
from typing import List, Dict, Any, Optional
from uuid import uuid4

from fpdf import FPDF

from talentdesk.config import settings
from talentdesk.utils.agence import AGENCE_CONFIG, CGV

logger = logging.getLogger(__name__)

# Core fonts only cover latin-1
_REPLACEMENTS = {
    "€": "EUR",
    "–": "-",
    "—": "-",
    "’": "'",
    "‘": "'",
    "“": '"',
    "”": '"',
    "…": "...",
    "\u202f": " ",
}


def latin1(text: Any) -> str:
    value = "" if text is None else str(text)
    for char, replacement in _REPLACEMENTS.items():
        value = value.replace(char, replacement)
    return value.encode("latin-1", "replace").decode("latin-1")


def format_montant(montant: Any) -> str:
    """1234.5 -> '1 234,50 EUR'"""
    value = Decimal(str(montant or 0)).quantize(Decimal('0.01'))
    entier, decimales = f"{value:.2f}".split(".")
    signe = "-" if entier.startswith("-") else ""
    entier = entier.lstrip("-")
    groupes = []
    while entier:
        groupes.insert(0, entier[-3:])
        entier = entier[:-3]
    return f"{signe}{' '.join(groupes)},{decimales} EUR"


class DocumentPDF(FPDF):
    """Quote / invoice layout with the agency header and a CGV appendix"""

    def __init__(self, document_type="FACTURE"):
        super().__init__()
        self.document_type = document_type.upper()
        self.set_margins(15, 15, 15)
        self.set_auto_page_break(True, margin=30)

    def header(self):
        self.set_font('Helvetica', 'B', 15)
        self.cell(0, 10, latin1(AGENCE_CONFIG["raison_sociale"]), 0, 1, 'R')
        self.set_font('Helvetica', '', 9)
        self.cell(0, 5, latin1(AGENCE_CONFIG["adresse"]), 0, 1, 'R')
        self.cell(0, 5, latin1(f"{AGENCE_CONFIG['code_postal']} {AGENCE_CONFIG['ville']}, {AGENCE_CONFIG['pays']}"), 0, 1, 'R')
        self.cell(0, 5, latin1(f"SIRET: {AGENCE_CONFIG['siret']}"), 0, 1, 'R')
        self.cell(0, 5, latin1(f"TVA: {AGENCE_CONFIG['tva']}"), 0, 1, 'R')
        self.cell(0, 5, latin1(AGENCE_CONFIG["email"]), 0, 1, 'R')
        self.ln(8)

    def footer(self):
        self.set_y(-22)
        self.set_font('Helvetica', '', 7)
        self.cell(0, 4, latin1(
            f"{AGENCE_CONFIG['raison_sociale']} - SAS au capital de {AGENCE_CONFIG['capital']} EUR - "
            f"{AGENCE_CONFIG['rcs']} - APE {AGENCE_CONFIG['ape']}"
        ), 0, 1, 'C')
        self.cell(0, 4, f"Page {self.page_no()}/{{nb}}", 0, 0, 'C')

    def document_title(self, reference, titre=None):
        libelle = {"DEVIS": "DEVIS", "AVOIR": "AVOIR"}.get(self.document_type, "FACTURE")
        self.set_font('Helvetica', 'B', 18)
        self.set_fill_color(41, 128, 185)
        self.set_text_color(255, 255, 255)
        self.cell(0, 14, latin1(f"{libelle} {reference}"), 0, 1, 'C', True)
        self.set_text_color(0, 0, 0)
        if titre:
            self.set_font('Helvetica', 'I', 11)
            self.cell(0, 8, latin1(titre), 0, 1, 'C')
        self.ln(6)

    def client_info(self, client_data):
        """Client block, taken from the collaboration billing snapshot"""
        self.set_font('Helvetica', 'B', 11)
        self.cell(0, 7, 'Client :', 0, 1)
        self.set_font('Helvetica', '', 10)
        self.cell(0, 5, latin1(client_data.get('raison_sociale')), 0, 1)
        self.cell(0, 5, latin1(client_data.get('adresse_rue')), 0, 1)
        self.cell(0, 5, latin1(f"{client_data.get('code_postal', '')} {client_data.get('ville', '')}"), 0, 1)
        self.cell(0, 5, latin1(client_data.get('pays')), 0, 1)
        if client_data.get('siret'):
            self.cell(0, 5, latin1(f"SIRET : {client_data['siret']}"), 0, 1)
        if client_data.get('numero_tva'):
            self.cell(0, 5, latin1(f"N° TVA : {client_data['numero_tva']}"), 0, 1)
        self.ln(5)

    def document_info(self, document_data):
        col_width = 60
        line_height = 6
        rows = [
            ("Date :", document_data.get('date')),
            ("Échéance :", document_data.get('due_date')),
            ("Bon de commande :", document_data.get('po_client')),
            ("Mode de paiement :", document_data.get('payment_method')),
        ]
        for label, value in rows:
            if not value:
                continue
            self.set_font('Helvetica', 'B', 10)
            self.cell(col_width, line_height, latin1(label), 0)
            self.set_font('Helvetica', '', 10)
            self.cell(0, line_height, latin1(value), 0, 1)
        self.ln(6)

    def items_table(self, items):
        w_desc, w_qty, w_price, w_tva, w_total = 85, 15, 30, 20, 30

        self.set_fill_color(240, 240, 240)
        self.set_font('Helvetica', 'B', 10)
        self.cell(w_desc, 9, 'Description', 1, 0, 'C', True)
        self.cell(w_qty, 9, latin1('Qté'), 1, 0, 'C', True)
        self.cell(w_price, 9, 'Prix HT', 1, 0, 'C', True)
        self.cell(w_tva, 9, 'TVA %', 1, 0, 'C', True)
        self.cell(w_total, 9, 'Total HT', 1, 1, 'C', True)

        self.set_font('Helvetica', '', 9)
        for item in items:
            lines = self.multi_cell(w_desc, 6, latin1(item.get('description')), dry_run=True, output="LINES") or [""]
            if self.will_page_break(6 * len(lines)):
                self.add_page()
            quantite = Decimal(str(item.get('quantite') or 0))
            self.cell(w_desc, 6, lines[0], 'LR', 0)
            self.cell(w_qty, 6, f"{quantite.normalize():f}", 'LR', 0, 'C')
            self.cell(w_price, 6, format_montant(item.get('prix_unitaire_ht')), 'LR', 0, 'R')
            self.cell(w_tva, 6, f"{Decimal(str(item.get('taux_tva') or 0)):.1f}%", 'LR', 0, 'C')
            self.cell(w_total, 6, format_montant(item.get('total_ht')), 'LR', 1, 'R')
            for line in lines[1:]:
                self.cell(w_desc, 6, line, 'LR', 0)
                self.cell(w_qty, 6, '', 'LR', 0)
                self.cell(w_price, 6, '', 'LR', 0)
                self.cell(w_tva, 6, '', 'LR', 0)
                self.cell(w_total, 6, '', 'LR', 1)

        self.cell(w_desc + w_qty + w_price + w_tva + w_total, 0, '', 'T', 1)
        self.ln(4)

    def totals_section(self, totals, mention_tva=None):
        w1, w2 = 150, 30
        self.set_font('Helvetica', 'B', 10)
        self.cell(w1, 7, 'Total HT :', 0, 0, 'R')
        self.cell(w2, 7, format_montant(totals.get('total_ht')), 0, 1, 'R')
        self.cell(w1, 7, 'Total TVA :', 0, 0, 'R')
        self.cell(w2, 7, format_montant(totals.get('total_tva')), 0, 1, 'R')
        self.set_font('Helvetica', 'B', 12)
        self.cell(w1, 9, 'Total TTC :', 0, 0, 'R')
        self.cell(w2, 9, format_montant(totals.get('total_ttc')), 0, 1, 'R')
        if mention_tva:
            self.set_font('Helvetica', 'I', 9)
            self.multi_cell(0, 5, latin1(mention_tva), new_x="LMARGIN", new_y="NEXT")
        self.ln(6)

    def notes_section(self, notes):
        if notes:
            self.set_font('Helvetica', 'B', 11)
            self.cell(0, 7, 'Notes :', 0, 1)
            self.set_font('Helvetica', '', 9)
            self.multi_cell(0, 5, latin1(notes), new_x="LMARGIN", new_y="NEXT")
            self.ln(4)

    def payment_instructions(self):
        self.set_font('Helvetica', 'B', 11)
        self.cell(0, 7, 'Conditions de paiement :', 0, 1)
        self.set_font('Helvetica', '', 9)
        if self.document_type == "FACTURE":
            rib = AGENCE_CONFIG["rib"]
            self.multi_cell(0, 5, latin1(AGENCE_CONFIG["conditions_paiement"]), new_x="LMARGIN", new_y="NEXT")
            self.multi_cell(0, 5, latin1(f"IBAN : {rib['iban']} - BIC : {rib['bic']} - Titulaire : {rib['titulaire']}"), new_x="LMARGIN", new_y="NEXT")
            self.ln(2)
            self.set_font('Helvetica', '', 7)
            self.multi_cell(0, 4, latin1(AGENCE_CONFIG["mentions_penalites"]), new_x="LMARGIN", new_y="NEXT")
        else:
            self.multi_cell(0, 5, latin1("Ce devis est valable 30 jours à compter de sa date d'émission. Bon pour accord :"), new_x="LMARGIN", new_y="NEXT")

    def cgv_appendix(self):
        self.add_page()
        self.set_font('Helvetica', '', 8)
        self.multi_cell(0, 4, latin1(CGV), new_x="LMARGIN", new_y="NEXT")


def _format_date(value: Optional[datetime]) -> Optional[str]:
    return value.strftime('%d/%m/%Y') if value else None


def generate_document_pdf(
    document_data: Dict[str, Any],
    client_data: Dict[str, Any],
    items: List[Dict[str, Any]],
    custom_note: Optional[str] = None
) -> str:
    """
    Render a quote or an invoice

    Args:
        document_data: type, reference, titre, dates, totals, mention_tva...
        client_data: Billing snapshot of the collaboration
        items: Document lines
        custom_note: Optional note overriding document_data["notes"]

    Returns:
        Path to the generated PDF file
    """
    pdf = DocumentPDF(document_data.get('type', 'FACTURE'))
    pdf.add_page()

    reference = document_data.get('reference') or str(document_data.get('id', ''))
    pdf.document_title(reference, document_data.get('titre'))
    pdf.client_info(client_data)
    pdf.document_info({
        'date': _format_date(document_data.get('date') or datetime.utcnow()),
        'due_date': _format_date(document_data.get('due_date')),
        'po_client': document_data.get('po_client'),
        'payment_method': document_data.get('payment_method'),
    })
    pdf.items_table(items)
    pdf.totals_section({
        'total_ht': document_data.get('total_ht', 0),
        'total_tva': document_data.get('total_tva', 0),
        'total_ttc': document_data.get('total_ttc', 0)
    }, document_data.get('mention_tva'))
    pdf.notes_section(custom_note or document_data.get('notes'))
    pdf.payment_instructions()
    pdf.cgv_appendix()

    output_dir = settings.PDF_OUTPUT_DIR or tempfile.gettempdir()
    os.makedirs(output_dir, exist_ok=True)
    file_name = f"{reference or 'document'}_{uuid4().hex[:8]}.pdf"
    file_path = os.path.join(output_dir, file_name)
    pdf.output(file_path)

    logger.info(f"PDF generated for {reference}: {file_path}")
    return file_path
