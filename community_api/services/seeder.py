from __future__ import annotations
import random
from datetime import datetime, timedelta
from typing import Sequence
from faker import Faker
from sqlalchemy.orm import Session

from community_api.models import (
    Article, ArticleStatus, Comment, Event, EventPriority, EventStatus, Post, Statistic, Video,
)
from community_api.services.engagement import toggle_like, toggle_share
from community_api.services.identity import ClientInfo

SEED = 1337

fake = Faker()


def seed_random_generators(seed: int = SEED) -> None:
    """Seed random and Faker so repeated runs produce identical data."""
    random.seed(seed)
    Faker.seed(seed)
    fake.seed_instance(seed)


def make_clients(n_clients: int) -> list[ClientInfo]:
    """Anonymous visitors; roughly a third send a client fingerprint."""
    clients = []
    for _ in range(n_clients):
        clients.append(ClientInfo(
            ip=fake.ipv4_public(),
            user_agent=fake.user_agent(),
            fingerprint=fake.sha1()[:32] if random.random() < 0.33 else None,
            country=fake.country_code(),
            city=fake.city(),
        ))
    return clients


def make_posts(db: Session, n_posts: int) -> list[Post]:
    posts = []
    for _ in range(n_posts):
        p = Post(
            title=fake.sentence(nb_words=6).rstrip("."),
            content=fake.paragraph(nb_sentences=random.randint(2, 6)),
            author=fake.user_name(),
            created_at=fake.date_time_between(start_date="-60d", end_date="now"),
        )
        db.add(p); posts.append(p)
    db.flush()
    return posts


def make_articles(db: Session, n_articles: int) -> list[Article]:
    articles = []
    for _ in range(n_articles):
        created = fake.date_time_between(start_date="-90d", end_date="now")
        published = random.random() < 0.7
        a = Article(
            title=fake.sentence(nb_words=8).rstrip("."),
            content="\n\n".join(fake.paragraphs(nb=random.randint(3, 8))),
            excerpt=fake.sentence(nb_words=20),
            author=fake.name(),
            status=ArticleStatus.published if published else ArticleStatus.draft,
            tags=",".join(fake.words(nb=random.randint(1, 4))),
            featured=published and random.random() < 0.15,
            created_at=created,
            published_at=created + timedelta(hours=random.randint(0, 48)) if published else None,
        )
        db.add(a); articles.append(a)
    db.flush()
    return articles


def make_comments(db: Session, posts: Sequence[Post], max_per_post: int = 8) -> list[Comment]:
    comments = []
    for p in posts:
        for _ in range(random.randint(0, max_per_post)):
            c = Comment(
                post_id=p.id,
                author=fake.user_name(),
                content=fake.sentence(),
                created_at=p.created_at + timedelta(minutes=random.randint(1, 600)),
            )
            db.add(c); comments.append(c)
    db.flush()
    return comments


def make_videos(db: Session, n_videos: int) -> list[Video]:
    videos = []
    for _ in range(n_videos):
        v = Video(
            title=fake.sentence(nb_words=5).rstrip("."),
            description=fake.paragraph(),
            url=fake.url() + fake.slug(),
            author=fake.user_name(),
            created_at=fake.date_time_between(start_date="-60d", end_date="now"),
        )
        db.add(v); videos.append(v)
    db.flush()
    return videos


def make_events(db: Session, n_events: int) -> list[Event]:
    events = []
    for _ in range(n_events):
        e = Event(
            title=fake.catch_phrase(),
            description=fake.paragraph(),
            event_date=fake.date_time_between(start_date="-30d", end_date="+60d"),
            duration_minutes=random.choice([30, 60, 90, 120]),
            location=fake.city(),
            meeting_link=fake.url() if random.random() < 0.5 else None,
            max_participants=random.choice([None, 25, 50, 100]),
            status=random.choice([EventStatus.published] * 3 + [EventStatus.draft, EventStatus.cancelled]),
            priority=random.choice(list(EventPriority)),
            created_by=fake.user_name(),
        )
        db.add(e); events.append(e)
    db.flush()
    return events


def make_engagements(db: Session, content: dict, clients: Sequence[ClientInfo]) -> None:
    """
    Drive likes/shares through the toggle protocol so counters match the ledger,
    and scatter raw view events (roughly views:likes:shares = 10:3:1).
    """
    now = datetime.utcnow()
    for content_type, items in content.items():
        for item in items:
            visitors = random.sample(list(clients), k=min(len(clients), random.randint(0, 20)))
            for client in visitors:
                if random.random() < 0.3:
                    toggle_like(db, content_type, item.id, client)
                if random.random() < 0.1:
                    toggle_share(db, content_type, item.id, client)
                for _ in range(random.randint(1, 3)):
                    item.view_count += 1
                    db.add(Statistic(
                        entity_type=content_type, entity_id=item.id, action=f"{content_type}_view",
                        ip_address=client.ip, user_agent=client.user_agent,
                        country=client.country, city=client.city,
                        created_at=now - timedelta(minutes=random.randint(0, 60 * 24 * 30)),
                    ))
    db.flush()
