import argparse
import random
import time

from adapter import GameDriver, HELD_ACTIONS, ONE_SHOT_ACTIONS


def get_args(argv=None):
    parser = argparse.ArgumentParser("""Headless falling-block simulation run""")

    parser.add_argument("--ticks", type=int, default=60 * 60 * 5)
    parser.add_argument("--seed", type=int, default=None)
    # how often the random player changes what it is holding
    parser.add_argument("--actions-every", type=int, default=10)
    parser.add_argument("--lines-per-level", type=int, default=10)

    return parser.parse_args(argv)


def random_player(driver: GameDriver, rng: random.Random):
    driver.release_all()
    held = rng.choice([None, *HELD_ACTIONS])
    if held is not None:
        driver.press(held)
    if rng.random() < 0.3:
        driver.press(rng.choice(list(ONE_SHOT_ACTIONS)))


def run(opt):
    driver = GameDriver(seed=opt.seed, lines_per_level=opt.lines_per_level)
    player_rng = random.Random(opt.seed)
    start = time.time()

    ticks = 0
    while ticks < opt.ticks and not driver.game_over:
        if ticks % opt.actions_every == 0:
            random_player(driver, player_rng)
        lines = driver.update()
        ticks += 1
        if lines:
            stats = driver.stats()
            print(f"tick {ticks}: cleared {lines} "
                  f"(score {stats['score']}, level {stats['level']})")

    stats = driver.stats()
    elapsed = time.time() - start
    print("-" * 40)
    print(f"Ticks:   {ticks} ({elapsed:.2f}s)")
    print(f"Score:   {stats['score']}")
    print(f"Lines:   {stats['lines']}")
    print(f"Level:   {stats['level']}")
    print(f"Pieces:  {stats['pieces']}")
    if stats["game_over"]:
        print("GAME OVER")
    return stats


def main(argv=None):
    opt = get_args(argv)
    return run(opt)


if __name__ == "__main__":
    main()
