"""
Study mode CLI.

Usage:
    python -m study.cli --db decks.jsonl decks [--search TERM]
    python -m study.cli --db decks.jsonl create "Name" [--description TEXT] [--tags "a, b"]
    python -m study.cli --db decks.jsonl add-card <deck_id> "Prompt" "Answer"
    python -m study.cli --db decks.jsonl import cards.json [--name NAME] [--tags "a, b"]
    python -m study.cli --db decks.jsonl show <deck_id>
    python -m study.cli --db decks.jsonl queue <deck_id>
    python -m study.cli --db decks.jsonl review <deck_id>
    python -m study.cli --db decks.jsonl rate <deck_id> <card_id> <0-5>
    python -m study.cli --db decks.jsonl delete <deck_id>
    python -m study.cli --db decks.jsonl explore [--search TERM] [--tag TAG]
    python -m study.cli --db decks.jsonl clone <community_deck_id>
    python -m study.cli --db decks.jsonl seed
"""

import sys
import argparse
import logging

from study.community import COMMUNITY_DECKS, clone_community_deck
from study.importer import DeckImportError, load_deck_file, parse_tags
from study.models import Deck, utcnow
from study.quality import Quality
from study.review_queue import build_queue, count_due
from study.search import collect_tags, filter_community, search_decks
from study.session import run_review_session
from study.storage import DeckStore


def _require_deck(store: DeckStore, deck_id: str) -> Deck:
    deck = store.get_deck(deck_id)
    if deck is None:
        print(f"Deck not found: {deck_id}")
        sys.exit(1)
    return deck


def cmd_decks(args):
    """List decks, optionally filtered by a search term."""
    store = DeckStore(args.db)
    decks = search_decks(store.all_decks(), args.search or '')
    if not decks:
        print("No decks found." if args.search else "No decks yet. Create one first.")
        return
    now = utcnow()
    print(f"\n{len(decks)} deck(s):\n")
    for deck in decks:
        tags = ', '.join(deck.tags)
        print(f"  {deck.deck_id}  {deck.name}")
        print(f"     cards={len(deck.cards)}  due={count_due(deck.cards, now)}"
              + (f"  tags={tags}" if tags else ""))


def cmd_create(args):
    """Create an empty deck."""
    store = DeckStore(args.db)
    deck = store.add_deck(
        name=args.name.strip(),
        description=(args.description or '').strip(),
        tags=parse_tags(args.tags or ''),
        author="You",
    )
    print(f"Created deck {deck.deck_id}: {deck.name}")


def cmd_add_card(args):
    """Append a card to a deck."""
    store = DeckStore(args.db)
    _require_deck(store, args.deck_id)
    prompt, answer = args.prompt.strip(), args.answer.strip()
    if not prompt or not answer:
        print("Both a prompt and an answer are required.")
        sys.exit(1)
    card = store.add_card(args.deck_id, prompt, answer)
    print(f"Added card {card.card_id}")


def cmd_import(args):
    """Create a deck from a JSON file."""
    try:
        payload = load_deck_file(args.file)
    except (OSError, DeckImportError) as e:
        print(f"Import failed: {e}")
        sys.exit(1)

    store = DeckStore(args.db)
    deck = store.add_deck(
        name=(args.name or payload['name']).strip(),
        description=args.description if args.description is not None else payload['description'],
        tags=parse_tags(args.tags) if args.tags is not None else payload['tags'],
        cards=payload['cards'],
        author="You",
    )
    print(f"Imported {len(deck.cards)} card(s) into deck {deck.deck_id}: {deck.name}")


def cmd_show(args):
    """Show a deck and its cards' scheduling state."""
    store = DeckStore(args.db)
    deck = _require_deck(store, args.deck_id)
    print(f"\n{deck.name}")
    if deck.description:
        print(f"  {deck.description}")
    if deck.tags:
        print(f"  tags: {', '.join(deck.tags)}")
    print(f"  updated: {deck.updated_at.isoformat()}")
    print(f"\n  {len(deck.cards)} card(s):")
    for card in deck.cards:
        print(f"    {card.card_id}  {card.prompt[:70]}")
        print(f"       due={card.due_date.isoformat()}  ef={card.easiness:.2f}  "
              f"interval={card.interval}d  reps={card.repetitions}")


def cmd_queue(args):
    """Print the review queue a session would start with."""
    store = DeckStore(args.db)
    deck = _require_deck(store, args.deck_id)
    now = utcnow()
    queue = build_queue(deck.cards, now)
    if not queue:
        print("No cards in this deck.")
        return
    due = count_due(deck.cards, now)
    label = f"{len(queue)} due" if due else f"nothing due, previewing {len(queue)}"
    print(f"\nQueue for {deck.name} ({label}):\n")
    for i, card_id in enumerate(queue, 1):
        card = deck.find_card(card_id)
        print(f"  {i}. {card_id}  {card.prompt[:70]}")


def cmd_review(args):
    """Run interactive study session."""
    store = DeckStore(args.db)
    _require_deck(store, args.deck_id)
    run_review_session(store, args.deck_id)


def cmd_rate(args):
    """Apply a single rating to a card without a session."""
    try:
        quality = Quality(args.quality)
    except ValueError:
        print(f"Quality must be 0-5, got {args.quality}")
        sys.exit(1)

    store = DeckStore(args.db)
    try:
        card = store.log_review(args.deck_id, args.card_id, quality)
    except KeyError as e:
        print(e.args[0])
        sys.exit(1)
    print(f"Rated {quality.label} ({quality.value}). Next review: "
          f"{card.due_date.isoformat()} (interval: {card.interval}d)")


def cmd_delete(args):
    store = DeckStore(args.db)
    if not store.remove_deck(args.deck_id):
        print(f"Deck not found: {args.deck_id}")
        sys.exit(1)
    print(f"Deleted deck {args.deck_id}")


def cmd_explore(args):
    """Browse the community catalog."""
    decks = filter_community(COMMUNITY_DECKS, args.search or '', args.tag)
    print(f"\nTags: {', '.join(collect_tags(COMMUNITY_DECKS))}")
    if not decks:
        print("\nNo decks match your filters yet. Try a different keyword or tag.")
        return
    print()
    for deck in decks:
        print(f"  {deck.deck_id}  {deck.name}  by {deck.author}  ({deck.likes} likes)")
        print(f"     {deck.description}")


def cmd_clone(args):
    store = DeckStore(args.db)
    try:
        deck = clone_community_deck(store, args.deck_id)
    except KeyError as e:
        print(e.args[0])
        sys.exit(1)
    print(f"Cloned into deck {deck.deck_id}: {deck.name}")


def cmd_seed(args):
    store = DeckStore(args.db)
    deck = store.seed_demo_deck()
    if deck is None:
        print("Store already has decks; nothing seeded.")
        return
    print(f"Seeded deck {deck.deck_id}: {deck.name}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="FlashLearn -- SM-2 flashcard decks",
        prog="python -m study.cli",
    )
    parser.add_argument(
        '--db', default='decks.jsonl',
        help="Path to deck storage JSONL file (default: decks.jsonl)",
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    decks_parser = subparsers.add_parser('decks', help='List decks')
    decks_parser.add_argument('--search', default='', help='Filter by text')

    create_parser = subparsers.add_parser('create', help='Create a deck')
    create_parser.add_argument('name', help='Deck name')
    create_parser.add_argument('--description', default='', help='Deck description')
    create_parser.add_argument('--tags', default='', help='Comma-separated tags')

    add_parser = subparsers.add_parser('add-card', help='Add a card to a deck')
    add_parser.add_argument('deck_id')
    add_parser.add_argument('prompt')
    add_parser.add_argument('answer')

    import_parser = subparsers.add_parser('import', help='Create a deck from JSON')
    import_parser.add_argument('file', help='JSON file: array of cards or {"cards": [...]}')
    import_parser.add_argument('--name', default=None, help='Deck name (default: from file)')
    import_parser.add_argument('--description', default=None)
    import_parser.add_argument('--tags', default=None, help='Comma-separated tags')

    show_parser = subparsers.add_parser('show', help='Show deck details')
    show_parser.add_argument('deck_id')

    queue_parser = subparsers.add_parser('queue', help='Show the review queue')
    queue_parser.add_argument('deck_id')

    review_parser = subparsers.add_parser('review', help='Run interactive study session')
    review_parser.add_argument('deck_id')

    rate_parser = subparsers.add_parser('rate', help='Rate one card (0-5)')
    rate_parser.add_argument('deck_id')
    rate_parser.add_argument('card_id')
    rate_parser.add_argument('quality', type=int)

    delete_parser = subparsers.add_parser('delete', help='Delete a deck')
    delete_parser.add_argument('deck_id')

    explore_parser = subparsers.add_parser('explore', help='Browse community decks')
    explore_parser.add_argument('--search', default='')
    explore_parser.add_argument('--tag', default=None)

    clone_parser = subparsers.add_parser('clone', help='Clone a community deck')
    clone_parser.add_argument('deck_id')

    subparsers.add_parser('seed', help='Add the starter deck to an empty store')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        'decks': cmd_decks,
        'create': cmd_create,
        'add-card': cmd_add_card,
        'import': cmd_import,
        'show': cmd_show,
        'queue': cmd_queue,
        'review': cmd_review,
        'rate': cmd_rate,
        'delete': cmd_delete,
        'explore': cmd_explore,
        'clone': cmd_clone,
        'seed': cmd_seed,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return
    handler(args)


if __name__ == '__main__':
    main()
