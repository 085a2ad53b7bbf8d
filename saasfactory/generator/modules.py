"""Generator modules. Each writes one slice of the Next.js project."""

import hashlib

from saasfactory.generator.writer import ProjectWriter

BASE_DIRS = (
    "app/(marketing)",
    "app/(auth)",
    "app/(dashboard)",
    "app/api/webhooks",
    "components/ui",
    "components/marketing",
    "components/dashboard",
    "components/shared",
    "components/providers",
    "lib",
    "hooks",
    "public",
)


def package_json(w: ProjectWriter) -> dict:
    features = w.project.features
    dependencies = {
        "next": "^16.0.10",
        "react": "^19.0.0",
        "react-dom": "^19.0.0",
        "class-variance-authority": "^0.7.1",
        "clsx": "^2.1.1",
        "tailwind-merge": "^2.6.0",
        "lucide-react": "^0.468.0",
        "zod": "^3.24.1",
    }
    if features.auth:
        dependencies["@clerk/nextjs"] = "^6.12.0"
    if features.database:
        dependencies["convex"] = "^1.17.4"
    if features.payments:
        dependencies["stripe"] = "^17.5.0"
        dependencies["@stripe/stripe-js"] = "^5.5.0"
    if features.analytics == "posthog":
        dependencies["posthog-js"] = "^1.194.0"
    if features.email:
        dependencies["resend"] = "^4.0.1"
        dependencies["@react-email/components"] = "^0.0.31"
    scripts = {
        "dev": "next dev --turbopack",
        "build": "next build",
        "start": "next start",
        "lint": "next lint",
    }
    if features.database:
        scripts["convex:dev"] = "convex dev"
        scripts["convex:deploy"] = "convex deploy"
    return {
        "name": w.project.name,
        "version": "0.1.0",
        "private": True,
        "type": "module",
        "scripts": scripts,
        "dependencies": dependencies,
        "devDependencies": {
            "typescript": "^5.7.2",
            "@types/node": "^22.10.5",
            "@types/react": "^19.0.2",
            "@types/react-dom": "^19.0.2",
            "tailwindcss": "^3.4.17",
            "postcss": "^8.4.49",
            "autoprefixer": "^10.4.20",
            "eslint": "^9.17.0",
            "eslint-config-next": "^15.1.3",
        },
    }


TSCONFIG = {
    "compilerOptions": {
        "target": "ES2017",
        "lib": ["dom", "dom.iterable", "esnext"],
        "allowJs": True,
        "skipLibCheck": True,
        "strict": True,
        "noEmit": True,
        "esModuleInterop": True,
        "module": "esnext",
        "moduleResolution": "bundler",
        "resolveJsonModule": True,
        "isolatedModules": True,
        "jsx": "preserve",
        "incremental": True,
        "plugins": [{"name": "next"}],
        "paths": {"@/*": ["./*"]},
    },
    "include": ["next-env.d.ts", "**/*.ts", "**/*.tsx", ".next/types/**/*.ts"],
    "exclude": ["node_modules"],
}


def generate_base(w: ProjectWriter) -> None:
    w.mkdirs(*BASE_DIRS)
    w.write_json("package.json", package_json(w))
    w.write_json("tsconfig.json", TSCONFIG)
    w.render("next.config.ts", "base/next.config.ts.j2")
    w.render(".gitignore", "base/gitignore.j2")
    w.render(".env.example", "base/env.example.j2")
    w.render("app/globals.css", "base/globals.css.j2")
    w.render("lib/utils.ts", "base/utils.ts.j2")
    w.render("app/page.tsx", "base/page.tsx.j2")
    w.render("app/(dashboard)/layout.tsx", "base/dashboard-layout.tsx.j2")
    w.render("app/(dashboard)/dashboard/page.tsx", "base/dashboard-page.tsx.j2")


def generate_auth(w: ProjectWriter) -> None:
    w.render("middleware.ts", "auth/middleware.ts.j2")
    w.render("app/(auth)/sign-in/[[...sign-in]]/page.tsx", "auth/sign-in.tsx.j2")
    w.render("app/(auth)/sign-up/[[...sign-up]]/page.tsx", "auth/sign-up.tsx.j2")
    w.render("app/(auth)/layout.tsx", "auth/layout.tsx.j2")


def generate_database(w: ProjectWriter) -> None:
    w.render("convex/schema.ts", "database/schema.ts.j2")
    w.render("convex/users.ts", "database/users.ts.j2")
    if w.project.features.auth:
        w.render("convex/auth.config.ts", "database/auth.config.ts.j2")


def generate_payments(w: ProjectWriter) -> None:
    mode = "payment" if w.project.pricing.type == "one-time" else "subscription"
    w.render("lib/stripe.ts", "payments/stripe.ts.j2")
    w.render("app/api/checkout/route.ts", "payments/checkout-route.ts.j2", checkout_mode=mode)
    w.render("app/api/webhooks/stripe/route.ts", "payments/webhook-route.ts.j2")
    w.render("app/(marketing)/pricing/page.tsx", "payments/pricing-page.tsx.j2")


def generate_seo(w: ProjectWriter) -> None:
    w.render("public/robots.txt", "seo/robots.txt.j2")
    w.render("app/sitemap.ts", "seo/sitemap.ts.j2")
    w.render("app/layout.tsx", "seo/layout.tsx.j2")
    w.render("public/llms.txt", "seo/llms.txt.j2")


def generate_analytics(w: ProjectWriter) -> None:
    w.render("lib/analytics.tsx", "analytics/analytics.tsx.j2")


def generate_email(w: ProjectWriter) -> None:
    w.render("lib/email.ts", "email/email.ts.j2")
    w.render("emails/welcome.tsx", "email/welcome.tsx.j2")


def generate_legal(w: ProjectWriter) -> None:
    w.render("app/(marketing)/privacy/page.tsx", "legal/privacy.tsx.j2")
    w.render("app/(marketing)/terms/page.tsx", "legal/terms.tsx.j2")


def brand_color(name: str) -> str:
    """Stable per-project accent color."""
    hue = int(hashlib.sha1(name.encode()).hexdigest()[:6], 16) % 360
    return f"hsl({hue}, 70%, 45%)"


def generate_assets(w: ProjectWriter) -> None:
    project = w.project
    w.render(
        "public/favicon.svg",
        "assets/favicon.svg.j2",
        color=brand_color(project.name),
        initial=project.display_name[:1].upper() or "S",
    )
    w.write_json(
        "public/site.webmanifest",
        {
            "name": project.display_name,
            "short_name": project.display_name,
            "description": project.description,
            "icons": [{"src": "/favicon.svg", "sizes": "any", "type": "image/svg+xml"}],
            "theme_color": "#ffffff",
            "background_color": "#ffffff",
            "display": "standalone",
        },
    )
