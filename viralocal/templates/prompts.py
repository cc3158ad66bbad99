"""Prompt builders and fixed fallback texts for the campaign generator."""

from viralocal.models import CampaignInput, DesignTrend, GenericTrend, TemplateMatch
from viralocal.templates.banners import get_banner_template_by_id


# =============================================================================
# FALLBACK TEXTS
# =============================================================================

# Follow-up question when the model answers with nothing
QUESTION_EMPTY_FALLBACK = "Quais são as variações ou modelos disponíveis?"

# Follow-up question when the model call fails
QUESTION_ERROR_FALLBACK = "Poderia dar mais detalhes técnicos sobre o produto?"

# Stored by the wizard if the question step fails outright
QUESTION_WIZARD_FALLBACK = "Quais os principais diferenciais deste produto?"

TREND_EMPTY_FALLBACK = "Estilo moderno, clean, fundo sólido e iluminação de estúdio."
TREND_ERROR_FALLBACK = (
    "Estilo comercial high-end, iluminação de estúdio profissional, fundo neutro."
)

COPY_ERROR_PLACEHOLDER = "Erro ao gerar texto."


# =============================================================================
# TEXT PROMPTS
# =============================================================================

def build_follow_up_prompt(description: str) -> str:
    return (
        "Você é um especialista em vendas.\n"
        f"Produto: \"{description}\".\n\n"
        "Analise a descrição e a imagem. Crie UMA ÚNICA pergunta curta para "
        "descobrir um detalhe técnico essencial que falta "
        "(ex: sabores, voltagem, marca).\n"
        "Retorne APENAS a pergunta."
    )


def build_trend_search_prompt(description: str) -> str:
    return (
        f"Primeiro, identifique o produto principal nesta descrição: \"{description}\".\n"
        "Em seguida, pesquise exatamente com a query: "
        "\"post [PRODUTO] site:designi.com.br\" "
        "(exemplo: para bolo, pesquise \"post bolo de pote site:designi.com.br\").\n\n"
        "Analise os títulos e trechos dos resultados para identificar o estilo "
        "visual (cores, fundos, elementos) que está em alta.\n\n"
        "Retorne APENAS um parágrafo curto de direção de arte técnica para um "
        "designer recriar esse estilo:\n"
        "1. Paleta de cores.\n"
        "2. Iluminação e fundo.\n"
        "3. Elementos chave."
    )


def build_copy_prompt(campaign_input: CampaignInput) -> str:
    """Structured prompt for a short Facebook/OLX style ad."""
    delivery_answer = "Sim" if campaign_input.delivery else "Não"
    delivery_label = "Entregamos" if campaign_input.delivery else "Retirada"

    return (
        "Crie UM ÚNICO texto de anúncio curto e direto para Facebook/OLX.\n"
        "Foco: venda rápida, urgência e clareza. Nada de enrolação.\n\n"
        f"Produto: {campaign_input.description}\n"
        f"Detalhes: {campaign_input.dynamic_answer}\n"
        f"Preço: {campaign_input.price}\n"
        f"Local: {campaign_input.location}\n"
        f"Entrega: {delivery_answer}\n"
        f"Zap: {campaign_input.contact_phone}\n\n"
        "Formato obrigatório:\n"
        "[Headline curta e impactante]\n\n"
        "[3 bullet points com os principais benefícios/detalhes]\n\n"
        f"💰 Apenas {campaign_input.price}\n"
        f"📍 {campaign_input.location} | 🚚 {delivery_label}\n"
        f"📲 Chame agora: {campaign_input.contact_phone}\n\n"
        "Sem hashtags. Sem introdução."
    )


# =============================================================================
# IMAGE PROMPTS
# =============================================================================

def build_clean_square_prompt(description: str) -> str:
    return (
        "Edit this product image to look like a high-end e-commerce photo.\n"
        "Ratio: 1:1 square.\n"
        "Action: remove background distractions, improve lighting, make the product pop.\n"
        "Background: clean, neutral, professional studio setting appropriate "
        f"for: \"{description}\".\n"
        "No text overlay."
    )


def build_clean_story_prompt() -> str:
    return (
        "Edit this product image for an Instagram Story background.\n"
        "Ratio: 9:16 vertical.\n"
        "Action: center the product, extend the background seamlessly top and bottom.\n"
        "Style: aesthetic, clean, minimalist.\n"
        "No text overlay."
    )


def _build_generic_design_prompt(trend_text: str, contact: str, price: str) -> str:
    return (
        "Act as a Senior Art Director. Create a high-conversion social media ad.\n\n"
        "[INPUT PRODUCT]\n"
        "Keep the product from the image exactly as is, but enhance sharpness and lighting.\n\n"
        "[ART DIRECTION & TRENDS]\n"
        "Apply this visual style found in top-performing ads for this niche:\n"
        f"\"{trend_text}\"\n\n"
        "[CORE PRINCIPLES]\n"
        "- Lighting: key light plus rim light for 3D separation. No flat lighting.\n"
        "- Composition: leave negative space for text. Clean, no clutter.\n"
        "- Quality: 8k, commercial photography.\n\n"
        "[TEXT OVERLAY]\n"
        "Integrate these details naturally, without covering the product:\n"
        f"- Price: \"{price}\"\n"
        f"- Contact: \"{contact}\"\n\n"
        "Make it look like a paid template from Designi or Canva."
    )


def build_design_prompt(trend: DesignTrend, contact: str, price: str) -> str:
    """
    Build the art-directed banner prompt for the resolved design trend.

    Raises:
        KeyError: TemplateMatch names a template that is not registered
        TypeError: trend is neither GenericTrend nor TemplateMatch
    """
    if isinstance(trend, TemplateMatch):
        template = get_banner_template_by_id(trend.template_id)
        if template is None:
            raise KeyError(f"Unknown banner template: {trend.template_id}")
        return template.render(contact=contact, price=price)
    if isinstance(trend, GenericTrend):
        return _build_generic_design_prompt(trend.text, contact, price)
    raise TypeError(f"Unsupported design trend: {trend!r}")
