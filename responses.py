# responses.py
"""
Canned HIV/AIDS answers keyed by Wit.ai entity name.

The bot never composes text itself: every reply is either one of the entries
below or FALLBACK_MESSAGE.
"""
from __future__ import annotations

import logging
from typing import Dict

logger = logging.getLogger("responses")

FALLBACK_MESSAGE = (
    "I'm not sure I understand what you're asking. You can try calling the Toll-Free "
    "HIV and AIDS Helpline and speak to a human - 0800-012-322"
)

# Entries that embed another answer after a blank line.
COMPOSITE_RESPONSES: Dict[str, str] = {
    "is_there_a_cure_for_hiv_or_aids": "how_to_stay_healthy_with_hiv",
    "what_is_hiv": "what_is_an_immune_system",
}

CANNED_RESPONSES: Dict[str, str] = {
    "can_you_have_hiv_without_aids": (
        "A person can have HIV for a long time without having AIDS. Most people don't look or feel sick when they first get HIV. "
        "They may not get sick for a long time. The virus can stay in their blood for years. At this stage, the person does not have AIDS. "
        "Usually people with HIV get sick only after five to ten years."
    ),
    "does_having_sex_with_a_virgin_cure_hiv": (
        "No, having sex with a virgin does not cure HIV or AIDS. "
        "There is no cure for HIV or AIDS yet, but it is still possible to live a long and healthy life."
    ),
    "how_to_avoid_getting_hiv": (
        "Always remember the following rules to keep safe from HIV:"
        "\n1. Use a new condom every time you have sex. Unprotected sex spreads HIV!"
        "\n2. Avoid touching blood with your bare hands."
        "\n3. Never touch a used injection needle, or a knife or a razor blade that has blood on it"
        "\n4. Cover a fresh open cut or bleeding wound with a plaster or bandage."
    ),
    "how_to_stay_healthy_with_hiv": (
        "A person with HIV can stay healthy by:"
        "\n1. Taking the required medicines regularly."
        "\n2. Eating fresh fruit and vegetables."
        "\n3. Exercising and playing sport, but also making sure they get plenty of rest."
    ),
    "how_to_tell_if_you_have_hiv": (
        "The only way to know for sure if a person has HIV is to have a blood test at a clinic or hospital. "
        "You cannot tell if someone has HIV by looking at them."
    ),
    "is_it_safe_to_get_an_injection": (
        "It is safe to have an injection at a clinic or a hospital. "
        "Doctors and nurses use only sterile injection needles. "
        "Sterile means that it is so clean that it has no germs on it."
    ),
    "is_there_a_cure_for_hiv_or_aids": (
        "There is no cure for HIV or AIDS yet, but it is still possible to live a long and healthy life."
    ),
    "what_causes_aids": "HIV causes AIDS",
    "what_causes_hiv": (
        "There are only three ways that people can get HIV:"
        "\n 1. By having unprotected sex with someone who has HIV"
        "\n 2. By allowing blood from an infected person to get into their own bloodstream. "
        "For instance, if a person with HIV uses a needle to inject drugs, and then shares the needle with someone else, the virus can be passed on"
        "\n 3. A mother with HIV can pass it on to her baby during pregnancy, in childbirth, or by breast-feeding."
        "\n\n You *cannot* get HIV from someone sneezing or coughing near you. "
        "You also cannot get HIV by touching, hugging or holding hands with someone who has HIV or AIDS"
    ),
    "what_happens_when_you_have_hiv": (
        "HIV slowly weakens the body's immune system. "
        "Five to ten years after getting the virus, the immune system becomes so weak that it can't defend the body against infections. "
        "The person with HIV then gets sick, usually with more than one illness."
    ),
    "what_is_aids": (
        "AIDS stands for Acquired Immune Deficiency Syndrome. "
        '\n"Acquired" means something that you get. Most people get AIDS from having unprotected sex or by sharing needles to inject drugs '
        '\n\n"Immune Deficiency" means that the body\'s immune system becomes damaged. '
        "When the immune system is weak, the body cannot fight off illnesses the way it usually does."
        '\n\n"Syndrome" means that a person gets several illnesses all at once.'
    ),
    "what_is_an_immune_system": (
        "Can you remember the last time you had a cold? "
        "For a while, your head ached, you coughed and you sniffed. "
        "Then the cold went away. This is because your body has an *immune system*. "
        "The immune system defends the body, and fights the germs and viruses that make you ill. "
        "But HIV attacks the immune system, and the body can no longer fight germs and infections"
    ),
    "what_is_hiv": (
        "HIV stands for Human Immunodeficiency Virus. Let's start with the short words: "
        '\n"Human" means that only people can get it. '
        '\nA "virus" is a type of germ that gets into a person\'s body. '
        '\n"Immunodeficiency" means that the body\'s immune system becomes weak'
    ),
    "what_is_the_difference_between_hiv_and_aids": (
        "There is a difference between HIV and AIDS. People who have HIV can stay healthy for a long time. "
        "They only start getting sick when their immune system is damaged and weak. We then say that they have AIDS."
    ),
    "what_is_unprotected_sex": (
        "Unprotected sex is any sex without a condom. Sometimes the condom might break or slip off during sex. This still counts as unprotected sex."
        "\n\nHaving unprotected sex puts you at risk of getting HIV. It is important to use a condom when having sex."
    ),
    "what_should_i_eat": (
        "People with HIV or AIDS should eat plenty of fresh fruit, vegetables, chicken and fish to stay healthy for as long as possible."
        "\n\nFresh vegetables and fruit are full of vitamins. Vitamins make the immune system strong, which helps your body to fight against illnesses."
    ),
    "where_did_aids_come_from": (
        "Nobody knows where HIV came from. Scientists think that it is a new germ that appeared only some years ago. "
        "HIV and AIDS were first identified in the early 1980s."
    ),
}


def known_entities():
    return sorted(CANNED_RESPONSES)


def message_for_entity(entity_name: str) -> str:
    """Return the reply for a Wit entity name, or "" when none is defined."""
    base = CANNED_RESPONSES.get(entity_name)
    if base is None:
        logger.warning("No message defined for entityName: %s", entity_name)
        return ""
    appendix = COMPOSITE_RESPONSES.get(entity_name)
    if appendix:
        return base + "\n\n" + message_for_entity(appendix)
    return base
